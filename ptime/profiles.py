# ptime/profiles.py
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .db import EMPLOYERS, PROFILES, WORKERS, first, run

ROLE_TABLES = {
    "employer": EMPLOYERS,
    "worker": WORKERS,
}


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def display_name(email: str) -> str:
    return normalize_email(email).split("@", 1)[0]


def get_by_id(sb, profile_id: str) -> Optional[Dict[str, Any]]:
    rows = run(
        sb.table(PROFILES).select("*").eq("id", profile_id).limit(1),
        "profiles select by id",
    )
    return first(rows)


def get_by_email(sb, email: str) -> Optional[Dict[str, Any]]:
    rows = run(
        sb.table(PROFILES).select("*").eq("email", normalize_email(email)).limit(1),
        "profiles select by email",
    )
    return first(rows)


def create(sb, profile_id: str, email: str, role: str) -> Dict[str, Any]:
    stamp = now_iso()
    rows = run(
        sb.table(PROFILES).insert({
            "id": profile_id,
            "email": normalize_email(email),
            "role": role,
            "created_at": stamp,
            "updated_at": stamp,
        }),
        "profiles insert",
    )
    return rows[0]


def delete(sb, profile_id: str) -> None:
    run(sb.table(PROFILES).delete().eq("id", profile_id), "profiles delete")


def get_role_record(sb, role: str, user_id: str) -> Optional[Dict[str, Any]]:
    rows = run(
        sb.table(ROLE_TABLES[role]).select("user_id").eq("user_id", user_id).limit(1),
        f"{ROLE_TABLES[role]} select",
    )
    return first(rows)


def create_role_record(sb, role: str, user_id: str, email: str) -> Dict[str, Any]:
    rows = run(
        sb.table(ROLE_TABLES[role]).insert({
            "user_id": user_id,
            "display_name": display_name(email),
            "email": normalize_email(email),
        }),
        f"{ROLE_TABLES[role]} insert",
    )
    return rows[0]
