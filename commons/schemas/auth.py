"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, EmailStr, Field

from commons.core.security import EMAIL_MAX_LEN, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from commons.schemas.users import UserRecord


class SignupRequest(BaseModel):
    """New account: identity credentials plus initial profile fields."""

    email: EmailStr = Field(..., max_length=EMAIL_MAX_LEN, description="Account email")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )
    name: str = Field(default="", max_length=255)
    phone: str = Field(default="", max_length=64)


class LoginRequest(BaseModel):
    """Login by email. Password is required unless AUTH_ENABLED is false."""

    email: str = Field(..., min_length=1, max_length=EMAIL_MAX_LEN, description="Account email")
    password: str | None = Field(default=None, max_length=PASSWORD_MAX_LEN, description="Password")


class LoginResponse(UserRecord):
    """The caller's user record plus a session token (omitted when AUTH_ENABLED is false)."""

    access_token: str | None = Field(default=None, description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
