# ptime/jobs.py
from typing import Any, Dict, List

from . import profiles
from .db import JOBS, first, run
from .errors import Forbidden, InvalidTransition, NotFound

# Reopening a filled job is allowed; cancelled is terminal.
TRANSITIONS = {
    "active": {"filled", "cancelled"},
    "filled": {"active", "cancelled"},
    "cancelled": set(),
}


def check_transition(current: str, requested: str) -> None:
    if requested == current:
        return
    if requested not in TRANSITIONS.get(current, set()):
        raise InvalidTransition(current, requested)


def create(sb, employer_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    stamp = profiles.now_iso()
    rows = run(
        sb.table(JOBS).insert({
            **fields,
            "employer_id": employer_id,
            "status": "active",
            "created_at": stamp,
            "updated_at": stamp,
        }),
        "jobs insert",
    )
    return rows[0]


def list_active(sb) -> List[Dict[str, Any]]:
    return run(
        sb.table(JOBS).select("*").eq("status", "active").order("created_at", desc=True),
        "jobs select",
    )


def list_by_employer(sb, employer_id: str) -> List[Dict[str, Any]]:
    return run(
        sb.table(JOBS).select("*").eq("employer_id", employer_id).order("created_at", desc=True),
        "jobs select by employer",
    )


def get_by_id(sb, job_id: str) -> Dict[str, Any]:
    row = first(run(sb.table(JOBS).select("*").eq("id", job_id).limit(1), "jobs select by id"))
    if not row:
        raise NotFound("Job not found")
    return row


def _owned(sb, job_id: str, employer_id: str, action: str) -> Dict[str, Any]:
    job = get_by_id(sb, job_id)
    if job["employer_id"] != employer_id:
        raise Forbidden(f"You can only {action} your own jobs")
    return job


def update(sb, job_id: str, employer_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    job = _owned(sb, job_id, employer_id, "update")
    if "status" in fields:
        check_transition(job["status"], fields["status"])
    if not fields:
        return job
    rows = run(
        sb.table(JOBS)
        .update({**fields, "updated_at": profiles.now_iso()})
        .eq("id", job_id)
        .eq("employer_id", employer_id),
        "jobs update",
    )
    return first(rows) or {**job, **fields}


def delete(sb, job_id: str, employer_id: str) -> None:
    _owned(sb, job_id, employer_id, "delete")
    run(sb.table(JOBS).delete().eq("id", job_id).eq("employer_id", employer_id), "jobs delete")
