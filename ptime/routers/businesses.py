# ptime/routers/businesses.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Response

from .. import businesses
from ..db import get_supabase
from ..deps import require_roles
from ..models import Business, BusinessCreate, BusinessUpdate, business_to_row, row_to_business

router = APIRouter(prefix="/businesses", tags=["businesses"])

employer_only = require_roles("employer")


@router.post("", response_model=Business, status_code=201)
def create_business(payload: BusinessCreate, user: Dict[str, Any] = Depends(employer_only), sb=Depends(get_supabase)):
    return row_to_business(businesses.create(sb, user["id"], business_to_row(payload)))


@router.get("", response_model=List[Business])
def list_businesses(user: Dict[str, Any] = Depends(employer_only), sb=Depends(get_supabase)):
    return [row_to_business(r) for r in businesses.list_by_employer(sb, user["id"])]


@router.get("/{business_id}", response_model=Business)
def get_business(business_id: str, user: Dict[str, Any] = Depends(employer_only), sb=Depends(get_supabase)):
    return row_to_business(businesses.get_by_id(sb, business_id, user["id"]))


@router.put("/{business_id}", response_model=Business)
def update_business(
    business_id: str,
    payload: BusinessUpdate,
    user: Dict[str, Any] = Depends(employer_only),
    sb=Depends(get_supabase),
):
    return row_to_business(businesses.update(sb, business_id, user["id"], business_to_row(payload)))


@router.delete("/{business_id}", status_code=204)
def delete_business(business_id: str, user: Dict[str, Any] = Depends(employer_only), sb=Depends(get_supabase)):
    businesses.soft_delete(sb, business_id, user["id"])
    return Response(status_code=204)
