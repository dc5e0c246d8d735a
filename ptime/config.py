# ptime/config.py
import os
from functools import lru_cache
from typing import List

from pydantic import BaseModel


class Settings(BaseModel):
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_anon_key: str = ""
    supabase_jwt_secret: str = ""  # <- HS256 secret for Supabase access tokens

    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    intent_token_expire_minutes: int = 10

    oauth_provider: str = "google"
    frontend_url: str = "http://localhost:5173"
    cors_origins: List[str] = ["*"]

    @property
    def supabase_auth_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/auth/v1"

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            supabase_url=os.getenv("SUPABASE_URL", ""),
            supabase_service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""),
            supabase_anon_key=os.getenv("SUPABASE_ANON_KEY", ""),
            supabase_jwt_secret=os.getenv("SUPABASE_JWT_SECRET", ""),
            jwt_secret=os.getenv("JWT_SECRET", "change-me"),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")),
            intent_token_expire_minutes=int(os.getenv("INTENT_TOKEN_EXPIRE_MINUTES", "10")),
            oauth_provider=os.getenv("OAUTH_PROVIDER", "google"),
            frontend_url=os.getenv("FRONTEND_URL", "http://localhost:5173"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
