# ptime/db.py
import logging
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import Client, create_client

from .config import get_settings
from .errors import Conflict, UpstreamFailure

log = logging.getLogger("uvicorn.error")

PROFILES = "profiles"
EMPLOYERS = "employers"
WORKERS = "workers"
BUSINESSES = "businesses"
JOBS = "jobs"
OAUTH_INTENTS = "oauth_intents"

UNIQUE_VIOLATION = "23505"

_client: Optional[Client] = None


def get_supabase() -> Client:
    """Service-role client, created on first use so the app boots without credentials."""
    global _client
    if _client is None:
        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_service_role_key:
            raise UpstreamFailure("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY")
        _client = create_client(settings.supabase_url, settings.supabase_service_role_key)
    return _client


def run(query, what: str) -> List[Dict[str, Any]]:
    """Execute a PostgREST query and return its rows; any client error becomes UpstreamFailure."""
    try:
        resp = query.execute()
    except APIError as e:
        if e.code == UNIQUE_VIOLATION:
            log.info("%s hit a unique constraint: %s", what, e.message)
            raise Conflict(f"{what} conflicts with an existing row") from e
        log.error("%s failed: %s", what, e)
        raise UpstreamFailure(f"{what} failed") from e
    except Exception as e:
        log.error("%s failed: %s", what, e)
        raise UpstreamFailure(f"{what} failed") from e
    return resp.data or []


def first(rows: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    return rows[0] if rows else None
