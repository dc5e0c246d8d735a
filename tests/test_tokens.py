from __future__ import annotations

from datetime import datetime, timezone

import pytest
from jose import jwt

from ptime import auth
from ptime.config import Settings
from ptime.errors import InvalidIntent, Unauthenticated
from tests.conftest import SUPABASE_JWT_SECRET, SUPABASE_URL, supabase_token


class FakeHTTPResponse:
    def __init__(self, status_code: int, payload: dict):
        self.status_code = status_code
        self._payload = payload

    def json(self) -> dict:
        return self._payload

    def raise_for_status(self) -> None:
        pass


def _settings(**overrides) -> Settings:
    values = {
        "supabase_url": SUPABASE_URL,
        "supabase_jwt_secret": SUPABASE_JWT_SECRET,
        "jwt_secret": "unit-secret",
    }
    values.update(overrides)
    return Settings(**values)


def test_hs256_token_is_verified_locally() -> None:
    token = supabase_token("x@example.com", user_id="u-1")
    identity = auth.verify_supabase_token(_settings(), token)
    assert identity.id == "u-1"
    assert identity.email == "x@example.com"
    assert identity.token == token


def test_wrong_issuer_is_rejected() -> None:
    token = supabase_token("x@example.com")
    with pytest.raises(Unauthenticated):
        auth.verify_supabase_token(_settings(supabase_url="https://elsewhere.supabase.co"), token)


def test_falls_back_to_supabase_user_lookup_without_secret(monkeypatch) -> None:
    calls = []

    def fake_get(url, headers=None, timeout=None):
        calls.append((url, headers))
        return FakeHTTPResponse(200, {"id": "u-2", "email": "y@example.com"})

    monkeypatch.setattr(auth.requests, "get", fake_get)
    token = supabase_token("y@example.com")
    identity = auth.verify_supabase_token(_settings(supabase_jwt_secret=""), token)
    assert identity.id == "u-2"
    assert calls[0][0] == f"{SUPABASE_URL}/auth/v1/user"
    assert calls[0][1]["Authorization"] == f"Bearer {token}"


def test_fallback_rejects_unknown_token(monkeypatch) -> None:
    monkeypatch.setattr(auth.requests, "get", lambda *a, **kw: FakeHTTPResponse(401, {}))
    with pytest.raises(Unauthenticated):
        auth.verify_supabase_token(_settings(), "not-a-jwt")


def test_intent_round_trip() -> None:
    settings = _settings()
    token = auth.create_intent_token(settings, "employer", "signin")
    intent = auth.decode_intent_token(settings, token)
    assert intent["role"] == "employer"
    assert intent["mode"] == "signin"
    assert intent["nonce"] == jwt.get_unverified_claims(token)["nonce"]
    assert intent["expires_at"] > datetime.now(timezone.utc).isoformat()


def test_access_token_is_not_an_intent() -> None:
    settings = _settings()
    token = auth.create_access_token(settings, {"id": "p1", "email": "a@example.com", "role": "worker"})
    with pytest.raises(InvalidIntent):
        auth.decode_intent_token(settings, token)
    assert auth.decode_access_token(settings, token)["sub"] == "p1"
