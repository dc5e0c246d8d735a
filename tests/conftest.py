from __future__ import annotations

import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from postgrest.exceptions import APIError

# Settings are cached on first use, so the environment is fixed before the app imports.
SUPABASE_URL = "https://ptime-test.supabase.co"
SUPABASE_JWT_SECRET = "supabase-test-secret"
os.environ["SUPABASE_URL"] = SUPABASE_URL
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role-test-key"
os.environ["SUPABASE_JWT_SECRET"] = SUPABASE_JWT_SECRET
os.environ["JWT_SECRET"] = "ptime-test-secret"
os.environ["FRONTEND_URL"] = "http://localhost:5173"


# columns backed by a unique constraint in the real schema
UNIQUE = {
    "profiles": "email",
    "oauth_intents": "nonce",
}


class FakeResponse:
    def __init__(self, data: list[dict[str, Any]]):
        self.data = data


class FakeQuery:
    """Just enough of the PostgREST request builder for the registries."""

    def __init__(self, db: "FakeSupabase", table: str):
        self._db = db
        self._table = table
        self._op = "select"
        self._payload: Any = None
        self._filters: list[tuple[str, str, Any]] = []
        self._order: tuple[str, bool] | None = None
        self._limit: int | None = None

    def select(self, *_columns: str) -> "FakeQuery":
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self._op, self._payload = "insert", payload
        return self

    def update(self, payload: dict[str, Any]) -> "FakeQuery":
        self._op, self._payload = "update", payload
        return self

    def delete(self) -> "FakeQuery":
        self._op = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append(("eq", column, value))
        return self

    def lt(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append(("lt", column, value))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self._order = (column, desc)
        return self

    def limit(self, n: int) -> "FakeQuery":
        self._limit = n
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        for op, col, val in self._filters:
            if op == "eq" and row.get(col) != val:
                return False
            if op == "lt" and not (row.get(col) is not None and row[col] < val):
                return False
        return True

    def execute(self) -> FakeResponse:
        if self._table in self._db.failing:
            raise RuntimeError(f"{self._table} is unavailable")
        rows = self._db.tables.setdefault(self._table, [])

        if self._op == "insert":
            items = self._payload if isinstance(self._payload, list) else [self._payload]
            out = []
            key = UNIQUE.get(self._table)
            for item in items:
                if key and any(r.get(key) == item.get(key) for r in rows):
                    raise APIError({
                        "message": f"duplicate key value violates unique constraint on {key}",
                        "code": "23505",
                    })
                row = {"id": str(uuid.uuid4()), **item, "_seq": self._db.next_seq()}
                rows.append(row)
                out.append(row)
            return FakeResponse([_public(r) for r in out])

        matched = [r for r in rows if self._matches(r)]
        if self._op == "update":
            for r in matched:
                r.update(self._payload)
            return FakeResponse([_public(r) for r in matched])
        if self._op == "delete":
            self._db.tables[self._table] = [r for r in rows if not self._matches(r)]
            return FakeResponse([_public(r) for r in matched])

        if self._order:
            column, desc = self._order
            matched.sort(key=lambda r: (r.get(column) or "", r["_seq"]), reverse=desc)
        if self._limit is not None:
            matched = matched[: self._limit]
        return FakeResponse([_public(r) for r in matched])


def _public(row: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in row.items() if k != "_seq"}


class FakeAdmin:
    def __init__(self):
        self.signed_out: list[str] = []

    def sign_out(self, jwt_token: str, scope: str = "global") -> None:
        self.signed_out.append(jwt_token)


class FakeAuth:
    def __init__(self):
        self.admin = FakeAdmin()


class FakeSupabase:
    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.failing: set[str] = set()
        self.auth = FakeAuth()
        self._seq = 0

    def next_seq(self) -> int:
        self._seq += 1
        return self._seq

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rows(self, name: str) -> list[dict[str, Any]]:
        return [_public(r) for r in self.tables.get(name, [])]


def supabase_token(email: str, user_id: str | None = None, minutes: int = 30) -> str:
    claims = {
        "sub": user_id or str(uuid.uuid4()),
        "email": email,
        "aud": "authenticated",
        "role": "authenticated",
        "iss": f"{SUPABASE_URL}/auth/v1",
        "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
    }
    return jwt.encode(claims, SUPABASE_JWT_SECRET, algorithm="HS256")


@pytest.fixture()
def sb() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture()
def client(sb: FakeSupabase):
    from ptime.db import get_supabase
    from ptime.main import create_app

    app = create_app()
    app.dependency_overrides[get_supabase] = lambda: sb
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def register(client):
    """Sign up through the API and return (bearer headers, profile)."""

    def _register(email: str, role: str) -> tuple[dict[str, str], dict[str, Any]]:
        token = supabase_token(email)
        r = client.post(
            "/auth/signup",
            json={"email": email, "role": role},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert r.status_code == 201, r.text
        body = r.json()
        return {"Authorization": f"Bearer {body['access_token']}"}, body["user"]

    return _register
