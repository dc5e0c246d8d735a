# ptime/routers/jobs.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from .. import jobs
from ..db import get_supabase
from ..deps import get_current_profile, require_roles
from ..models import Job, JobCreate, JobUpdate, Message

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("", response_model=List[Job])
def list_jobs(sb=Depends(get_supabase)):
    return jobs.list_active(sb)


# declared before /{job_id} so "mine" is not taken for an id
@router.get("/mine", response_model=List[Job])
def list_my_jobs(user: Dict[str, Any] = Depends(require_roles("employer")), sb=Depends(get_supabase)):
    return jobs.list_by_employer(sb, user["id"])


@router.get("/{job_id}", response_model=Job)
def get_job(job_id: str, sb=Depends(get_supabase)):
    return jobs.get_by_id(sb, job_id)


@router.post("", response_model=Job, status_code=201)
def create_job(payload: JobCreate, user: Dict[str, Any] = Depends(require_roles("employer")), sb=Depends(get_supabase)):
    return jobs.create(sb, user["id"], payload.model_dump(exclude_none=True))


@router.put("/{job_id}", response_model=Job)
def update_job(
    job_id: str,
    payload: JobUpdate,
    user: Dict[str, Any] = Depends(get_current_profile),
    sb=Depends(get_supabase),
):
    return jobs.update(sb, job_id, user["id"], payload.model_dump(exclude_none=True))


@router.delete("/{job_id}", response_model=Message)
def delete_job(job_id: str, user: Dict[str, Any] = Depends(get_current_profile), sb=Depends(get_supabase)):
    jobs.delete(sb, job_id, user["id"])
    return {"message": "Job deleted successfully"}
