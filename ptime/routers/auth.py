# ptime/routers/auth.py
from typing import Any, Dict
from urllib.parse import urlencode

from fastapi import APIRouter, Depends

from ..auth import ExternalIdentity, create_access_token, create_intent_token
from ..config import Settings, get_settings
from ..db import get_supabase
from ..deps import get_current_profile, get_external_identity
from ..models import AuthResponse, Message, OAuthCallback, OAuthStart, OAuthStartOut, Profile, SignRequest
from ..reconcile import reconcile, reconcile_state

router = APIRouter(prefix="/auth", tags=["auth"])


def _session(settings: Settings, profile: Dict[str, Any]) -> AuthResponse:
    return AuthResponse(access_token=create_access_token(settings, profile), user=Profile(**profile))


@router.post("/signup", response_model=AuthResponse, status_code=201)
def signup(
    payload: SignRequest,
    identity: ExternalIdentity = Depends(get_external_identity),
    settings: Settings = Depends(get_settings),
    sb=Depends(get_supabase),
):
    profile = reconcile(sb, identity, "signup", payload.role, email=payload.email)
    return _session(settings, profile)


@router.post("/signin", response_model=AuthResponse)
def signin(
    payload: SignRequest,
    identity: ExternalIdentity = Depends(get_external_identity),
    settings: Settings = Depends(get_settings),
    sb=Depends(get_supabase),
):
    profile = reconcile(sb, identity, "signin", payload.role, email=payload.email)
    return _session(settings, profile)


@router.post("/oauth/start", response_model=OAuthStartOut)
def oauth_start(payload: OAuthStart, settings: Settings = Depends(get_settings)):
    state = create_intent_token(settings, payload.role, payload.mode)
    redirect_to = f"{settings.frontend_url.rstrip('/')}/auth/callback?{urlencode({'state': state})}"
    query = urlencode({"provider": settings.oauth_provider, "redirect_to": redirect_to})
    return OAuthStartOut(
        state=state,
        authorize_url=f"{settings.supabase_auth_url}/authorize?{query}",
        expires_in=settings.intent_token_expire_minutes * 60,
    )


@router.post("/oauth/callback", response_model=AuthResponse)
def oauth_callback(
    payload: OAuthCallback,
    identity: ExternalIdentity = Depends(get_external_identity),
    settings: Settings = Depends(get_settings),
    sb=Depends(get_supabase),
):
    profile = reconcile_state(sb, settings, identity, payload.state)
    return _session(settings, profile)


@router.get("/profile", response_model=Profile)
def get_profile(profile: Dict[str, Any] = Depends(get_current_profile)):
    return profile


@router.post("/signout", response_model=Message)
def signout(profile: Dict[str, Any] = Depends(get_current_profile)):
    # Bearer tokens are stateless; the client discards its copy.
    return {"message": "Signed out successfully"}
