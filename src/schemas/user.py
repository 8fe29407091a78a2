"""User schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator

from src.schemas.validators import (
    PASSWORD_MAX_BYTES,
    normalize_email,
    validate_password_strength,
)

# Names are trimmed; passwords are hashed exactly as typed
UserName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


class UserCreate(BaseModel):
    """User signup request."""

    model_config = ConfigDict(extra="forbid")

    name: UserName
    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., max_length=PASSWORD_MAX_BYTES)
    age: int = Field(0, ge=0)

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, v):
        return normalize_email(v) if isinstance(v, str) else v

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)


class UserLogin(BaseModel):
    """User login request."""

    email: str = Field(..., max_length=255)
    password: str = Field(..., max_length=128)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return normalize_email(v)


class UserUpdate(BaseModel):
    """Mutable profile fields. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    name: UserName | None = None
    email: EmailStr | None = None
    password: str | None = Field(None, max_length=PASSWORD_MAX_BYTES)
    age: int | None = Field(None, ge=0)

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, v):
        return normalize_email(v) if isinstance(v, str) else v

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str | None) -> str | None:
        return validate_password_strength(v) if v is not None else v


class UserResponse(BaseModel):
    """Public user profile. Never carries the password hash, tokens or avatar bytes."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    age: int
    created_at: datetime
    updated_at: datetime


class AuthResponse(BaseModel):
    """Signup/login response with the new session token."""

    user: UserResponse
    token: str


class MessageResponse(BaseModel):
    """Simple acknowledgement."""

    message: str
