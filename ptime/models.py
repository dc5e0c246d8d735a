# ptime/models.py
from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator

Role = Literal["worker", "employer"]
Mode = Literal["signup", "signin"]
JobStatus = Literal["active", "filled", "cancelled"]

ADDRESS_FIELDS = ("street", "city", "county", "state", "zipcode")


def _email_like(v: str) -> str:
    value = (v or "").strip()
    left, sep, right = value.partition("@")
    if not sep or not left or not right:
        raise ValueError("email must have text before and after '@'")
    return value


# ──────────────────────────────────────────────────────────────────────────────
# Auth (emails as plain strings to avoid extra dependency)
# ──────────────────────────────────────────────────────────────────────────────
class Profile(BaseModel):
    id: str
    email: str
    role: Role
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SignRequest(BaseModel):
    email: str
    role: Role

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        return _email_like(v)


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Profile


class OAuthStart(BaseModel):
    role: Role
    mode: Mode


class OAuthStartOut(BaseModel):
    state: str
    authorize_url: str
    expires_in: int


class OAuthCallback(BaseModel):
    state: str = Field(..., min_length=1)


# ──────────────────────────────────────────────────────────────────────────────
# Businesses
# ──────────────────────────────────────────────────────────────────────────────
class Address(BaseModel):
    street: str
    city: str
    county: str
    state: str
    zipcode: str


class AddressUpdate(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    county: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None


class GeoData(BaseModel):
    lat: float
    lng: float
    place_id: Optional[str] = None
    formatted_address: Optional[str] = None


class BusinessCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Address
    geo_data: Optional[GeoData] = None

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _email_like(v)


class BusinessUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[AddressUpdate] = None
    geo_data: Optional[GeoData] = None

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _email_like(v)


class Business(BaseModel):
    id: str
    employer_id: str
    name: str
    type: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Address
    geo_data: Optional[GeoData] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def business_to_row(payload: BaseModel) -> Dict[str, Any]:
    """Flatten a create/update body into `businesses` columns, skipping empty fields."""
    data = payload.model_dump(exclude_none=True)
    address = data.pop("address", None) or {}
    for key in ADDRESS_FIELDS:
        if address.get(key) is not None:
            data[f"address_{key}"] = address[key]
    return data


def row_to_business(row: Dict[str, Any]) -> Business:
    return Business(
        id=row["id"],
        employer_id=row["employer_id"],
        name=row["name"],
        type=row["type"],
        email=row.get("email"),
        phone=row.get("phone"),
        address=Address(**{key: row.get(f"address_{key}") or "" for key in ADDRESS_FIELDS}),
        geo_data=row.get("geo_data"),
        is_active=row.get("is_active", True),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


# ──────────────────────────────────────────────────────────────────────────────
# Jobs
# ──────────────────────────────────────────────────────────────────────────────
class JobCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    location: Optional[str] = None
    hourly_rate: Optional[float] = Field(default=None, ge=0)


class JobUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    location: Optional[str] = None
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    status: Optional[JobStatus] = None


class Job(BaseModel):
    id: str
    employer_id: str
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    hourly_rate: Optional[float] = None
    status: JobStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Message(BaseModel):
    message: str
