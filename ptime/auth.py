# ptime/auth.py
import logging
import secrets
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, NamedTuple

import requests
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from .config import Settings
from .errors import InvalidIntent, Unauthenticated, UpstreamFailure

log = logging.getLogger("uvicorn.error")

INTENT_TYPE = "oauth_intent"

_cache: Dict[str, Any] = {"jwks": None, "fetched_at": 0}


class ExternalIdentity(NamedTuple):
    id: str
    email: str
    token: str


# ──────────────────────────────────────────────────────────────────────────────
# Supabase access tokens (external identity)
# ──────────────────────────────────────────────────────────────────────────────
def _auth_headers(settings: Settings, token: str = "") -> Dict[str, str]:
    headers = {"apikey": settings.supabase_anon_key or ""}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _get_jwks(settings: Settings) -> Dict[str, Any]:
    now = time.time()
    if not _cache["jwks"] or now - _cache["fetched_at"] > 600:
        url = f"{settings.supabase_auth_url}/.well-known/jwks.json"
        try:
            resp = requests.get(url, headers=_auth_headers(settings, settings.supabase_anon_key), timeout=10)
            resp.raise_for_status()
        except requests.RequestException as e:
            log.error("JWKS fetch failed: %s", e)
            raise UpstreamFailure("Could not fetch Supabase signing keys") from e
        _cache["jwks"] = resp.json()
        _cache["fetched_at"] = now
    return _cache["jwks"]


def _fetch_identity_from_supabase(settings: Settings, token: str) -> ExternalIdentity:
    """Fallback: ask Supabase who this token belongs to."""
    try:
        r = requests.get(f"{settings.supabase_auth_url}/user", headers=_auth_headers(settings, token), timeout=10)
    except requests.RequestException as e:
        log.error("Supabase user lookup failed: %s", e)
        raise UpstreamFailure("Could not reach Supabase auth") from e
    if r.status_code != 200:
        raise Unauthenticated("Could not verify token with Supabase")
    data = r.json() or {}
    user = data.get("user") or data
    if not user.get("id") or not user.get("email"):
        raise Unauthenticated("User not found from Supabase")
    return ExternalIdentity(id=user["id"], email=user["email"], token=token)


def _identity_from_claims(claims: Dict[str, Any], token: str) -> ExternalIdentity:
    sub = claims.get("sub")
    email = claims.get("email")
    if not sub:
        raise Unauthenticated("Token missing subject (sub)")
    if not email:
        raise Unauthenticated("Token missing email")
    return ExternalIdentity(id=sub, email=email, token=token)


def verify_supabase_token(settings: Settings, token: str) -> ExternalIdentity:
    """
    Accepts Supabase access tokens signed with:
      - HS256 (JWT secret)       -> verify with SUPABASE_JWT_SECRET
      - RS256 / ES256 (JWKS)     -> verify with JWKS
    Falls back to /auth/v1/user if needed.
    """
    try:
        unverified_header = jwt.get_unverified_header(token)
        alg = (unverified_header.get("alg") or "").upper()
    except JWTError:
        return _fetch_identity_from_supabase(settings, token)

    if alg == "HS256":
        if not settings.supabase_jwt_secret:
            return _fetch_identity_from_supabase(settings, token)
        key: Any = settings.supabase_jwt_secret
    elif alg in ("RS256", "ES256"):
        jwks = _get_jwks(settings)
        kid = unverified_header.get("kid")
        key = next((k for k in jwks.get("keys", []) if k.get("kid") == kid), None)
        if not key:
            raise Unauthenticated("Signing key not found")
    else:
        return _fetch_identity_from_supabase(settings, token)

    try:
        claims = jwt.decode(
            token,
            key,
            algorithms=[alg],
            options={"verify_aud": False},
            issuer=settings.supabase_auth_url,
        )
    except JWTError as e:
        raise Unauthenticated(f"Invalid token ({alg}): {e}") from e
    return _identity_from_claims(claims, token)


def sign_out_external(sb, identity: ExternalIdentity) -> None:
    """End the provider session; failures are logged so the caller's rejection still surfaces."""
    try:
        sb.auth.admin.sign_out(identity.token)
    except Exception as e:
        log.error("external sign-out failed for %s: %s", identity.email, e)


# ──────────────────────────────────────────────────────────────────────────────
# PTime bearer credential
# ──────────────────────────────────────────────────────────────────────────────
def create_access_token(settings: Settings, profile: Dict[str, Any]) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    claims = {
        "email": profile["email"],
        "sub": profile["id"],
        "role": profile["role"],
        "exp": expire,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(settings: Settings, token: str) -> Dict[str, Any]:
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as e:
        raise Unauthenticated("Token expired") from e
    except JWTError as e:
        raise Unauthenticated("Invalid token") from e
    if claims.get("typ") == INTENT_TYPE or not claims.get("sub"):
        raise Unauthenticated("Invalid token payload")
    return claims


# ──────────────────────────────────────────────────────────────────────────────
# OAuth intent (carried through the provider redirect as `state`)
# ──────────────────────────────────────────────────────────────────────────────
def create_intent_token(settings: Settings, role: str, mode: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.intent_token_expire_minutes)
    claims = {
        "typ": INTENT_TYPE,
        "role": role,
        "mode": mode,
        "nonce": secrets.token_urlsafe(16),
        "exp": expire,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_intent_token(settings: Settings, token: str) -> Dict[str, str]:
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as e:
        raise InvalidIntent("Sign-in request expired, please start again") from e
    except JWTError as e:
        raise InvalidIntent("Sign-in request could not be verified") from e
    if claims.get("typ") != INTENT_TYPE:
        raise InvalidIntent("Not a sign-in request token")
    if claims.get("role") not in ("worker", "employer") or claims.get("mode") not in ("signup", "signin"):
        raise InvalidIntent("Malformed sign-in request")
    if not claims.get("nonce") or not claims.get("exp"):
        raise InvalidIntent("Malformed sign-in request")
    return {
        "role": claims["role"],
        "mode": claims["mode"],
        "nonce": claims["nonce"],
        "expires_at": datetime.fromtimestamp(claims["exp"], timezone.utc).isoformat(),
    }
