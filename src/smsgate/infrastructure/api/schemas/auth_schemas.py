"""Pydantic schemas for registration and login."""

from pydantic import BaseModel, EmailStr, Field

from smsgate.infrastructure.api.schemas.user_schemas import UserResponse


class RegisterRequest(BaseModel):
    """Request schema for user registration."""

    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: EmailStr = Field(..., description="Email address")
    phone: str | None = Field(None, max_length=32, description="Phone number")
    password: str = Field(..., min_length=8, max_length=128, description="Password")
    turnstile_token: str | None = Field(None, description="Bot verification token")
    invite_code: str | None = Field(
        None, max_length=64, description="Required when registration is invite-only"
    )


class LoginRequest(BaseModel):
    """Request schema for password login."""

    email: EmailStr
    password: str = Field(..., min_length=1)
    turnstile_token: str | None = None


class AuthResponse(BaseModel):
    """Response schema for successful registration or login."""

    access_token: str = Field(..., description="Bearer token")
    token_type: str = Field("bearer", description="Token type")
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: UserResponse


class RegistrationModeResponse(BaseModel):
    """Current registration mode."""

    mode: str = Field(..., description="'open' or 'invite_only'")
    invite_only: bool
