# ptime/businesses.py
import logging
from typing import Any, Dict, List

from . import profiles
from .db import BUSINESSES, first, run
from .errors import InvalidEmployer, NotFound

log = logging.getLogger("uvicorn.error")


def ensure_employer(sb, employer_id: str) -> None:
    """Create the employer record on first registration; only employer profiles qualify."""
    if profiles.get_role_record(sb, "employer", employer_id):
        return
    profile = profiles.get_by_id(sb, employer_id)
    if not profile or profile["role"] != "employer":
        raise InvalidEmployer("Invalid employer user")
    profiles.create_role_record(sb, "employer", employer_id, profile["email"])
    log.info("created employer record for %s", employer_id)


def create(sb, employer_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    ensure_employer(sb, employer_id)
    stamp = profiles.now_iso()
    rows = run(
        sb.table(BUSINESSES).insert({
            **fields,
            "employer_id": employer_id,
            "is_active": True,
            "created_at": stamp,
            "updated_at": stamp,
        }),
        "businesses insert",
    )
    return rows[0]


def list_by_employer(sb, employer_id: str) -> List[Dict[str, Any]]:
    return run(
        sb.table(BUSINESSES)
        .select("*")
        .eq("employer_id", employer_id)
        .eq("is_active", True)
        .order("created_at", desc=True),
        "businesses select",
    )


def get_by_id(sb, business_id: str, employer_id: str) -> Dict[str, Any]:
    rows = run(
        sb.table(BUSINESSES)
        .select("*")
        .eq("id", business_id)
        .eq("employer_id", employer_id)
        .eq("is_active", True)
        .limit(1),
        "businesses select by id",
    )
    row = first(rows)
    if not row:
        raise NotFound("Business not found")
    return row


def update(sb, business_id: str, employer_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    current = get_by_id(sb, business_id, employer_id)
    if not fields:
        return current
    rows = run(
        sb.table(BUSINESSES)
        .update({**fields, "updated_at": profiles.now_iso()})
        .eq("id", business_id)
        .eq("employer_id", employer_id),
        "businesses update",
    )
    return first(rows) or {**current, **fields}


def soft_delete(sb, business_id: str, employer_id: str) -> None:
    get_by_id(sb, business_id, employer_id)
    run(
        sb.table(BUSINESSES)
        .update({"is_active": False, "updated_at": profiles.now_iso()})
        .eq("id", business_id)
        .eq("employer_id", employer_id),
        "businesses soft delete",
    )
