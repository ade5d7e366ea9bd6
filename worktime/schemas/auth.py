"""Pydantic schemas for registration, login and the current-user profile."""

from __future__ import annotations

import re
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(value: str) -> str:
    email = (value or "").strip().lower()
    if not EMAIL_RE.match(email):
        raise ValueError("Valid email is required")
    return email


Email = Annotated[str, AfterValidator(normalize_email)]


class RegisterRequest(BaseModel):
    email: Email
    password: str = Field(..., min_length=6)
    name: str

    model_config = {
        "json_schema_extra": {
            "example": {"email": "a@b.com", "password": "secret1", "name": "Ada"}
        }
    }

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


class LoginRequest(BaseModel):
    email: Email
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    created_at: str = Field(serialization_alias="createdAt")
    last_login: Optional[str] = Field(default=None, serialization_alias="lastLogin")


class AuthResponse(BaseModel):
    message: str
    user: UserOut
    token: str


class MeResponse(BaseModel):
    user: UserOut
