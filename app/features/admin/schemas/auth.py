import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.features.admin.models.admin import AdminRole
from app.platform.utils.sanitize import sanitize_text


def validate_password_strength(v: str) -> str:
    if len(v) < 8:
        raise ValueError("Password must be at least 8 characters")
    if not re.search(r"[A-Z]", v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", v):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"\d", v):
        raise ValueError("Password must contain at least one number")
    if not re.search(r"[^A-Za-z0-9]", v):
        raise ValueError("Password must contain at least one special character")
    return v


class AdminRegistrationRequest(BaseModel):
    name: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=30)
    password: str
    role: Optional[AdminRole] = None

    @field_validator("name", mode="before")
    @classmethod
    def clean_name(cls, v):
        return sanitize_text(v) if isinstance(v, str) else v

    @field_validator("username", mode="before")
    @classmethod
    def clean_username(cls, v):
        return sanitize_text(v).lower() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("role", mode="before")
    @classmethod
    def lower_role(cls, v):
        return v.lower() if isinstance(v, str) else v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_strength(v)


class AdminLoginRequest(BaseModel):
    # Username, or email when it contains "@"
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("username")
    @classmethod
    def normalize_identifier(cls, v: str) -> str:
        return v.strip().lower()


class AdminResponse(BaseModel):
    id: str
    name: str
    email: str
    username: str
    role: AdminRole
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdminSummary(BaseModel):
    user_id: str
    username: str
    role: AdminRole


class AdminAuthResponse(BaseModel):
    user: AdminSummary
    access_token: str
    token_type: str = "bearer"
