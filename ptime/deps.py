# ptime/deps.py
from typing import Any, Callable, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from . import profiles
from .auth import ExternalIdentity, decode_access_token, verify_supabase_token
from .config import Settings, get_settings
from .db import get_supabase
from .errors import Forbidden, Unauthenticated

security = HTTPBearer(auto_error=False)


def _bearer(credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    if not credentials or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise Unauthenticated("Missing bearer token")
    return credentials.credentials


def get_external_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
) -> ExternalIdentity:
    """Identity behind a Supabase access token (only used by the sign-in/sign-up routes)."""
    return verify_supabase_token(settings, _bearer(credentials))


def get_current_profile(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
    sb=Depends(get_supabase),
) -> Dict[str, Any]:
    claims = decode_access_token(settings, _bearer(credentials))
    profile = profiles.get_by_id(sb, claims["sub"])
    if not profile:
        raise Unauthenticated("User not found")
    return profile


def require_roles(*roles: str) -> Callable[..., Dict[str, Any]]:
    """Dependency factory: the caller's profile, rejected unless its role is allowed."""

    def checker(profile: Dict[str, Any] = Depends(get_current_profile)) -> Dict[str, Any]:
        if roles and profile["role"] not in roles:
            raise Forbidden(f"{' or '.join(roles).capitalize()} role required")
        return profile

    return checker
