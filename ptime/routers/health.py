# ptime/routers/health.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from ..db import PROFILES, get_supabase, run
from ..errors import UpstreamFailure

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health():
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/db")
def health_db(sb=Depends(get_supabase)):
    """Ping Supabase using the service role (set SUPABASE_URL & SUPABASE_SERVICE_ROLE_KEY)."""
    try:
        run(sb.table(PROFILES).select("id").limit(1), "health ping")
    except UpstreamFailure as e:
        raise HTTPException(status_code=503, detail=f"DB check failed: {e}")
    return {"ok": True, "db": "up"}
