from pydantic import EmailStr, Field, field_validator
from enum import Enum
from typing import Optional
from datetime import datetime
from uuid import UUID
from app.schemas.common import CamelModel, sanitize_input


class Role(str, Enum):
    admin = "admin"
    staff = "staff"
    customer = "customer"


def _normalize_email(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


class UserCreate(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, pattern=r"^\+?[1-9]\d{0,15}$")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def clean_names(cls, v):
        return sanitize_input(v)


class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)


class UserOut(CamelModel):
    id: UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role: Role = Role.customer
    is_active: bool = True
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    message: str
    user: UserOut
    access_token: str
    refresh_token: str


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class RefreshTokenResponse(CamelModel):
    access_token: str


class LogoutRequest(CamelModel):
    refresh_token: Optional[str] = None


class PasswordResetRequest(CamelModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)


class PasswordReset(CamelModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)
