"""Pydantic schemas for user representations."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
    """Response schema for a user. The password hash is never exposed."""

    id: str = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address")
    phone: str | None = Field(None, description="Phone number")
    role: str = Field(..., description="ADMIN or REGULAR")
    is_banned: bool = Field(..., description="Whether the user is banned")
    email_verified: bool = Field(..., description="Whether the email was verified")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
    last_login_at: datetime | None = Field(None, description="Last successful login")

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    """Compact user reference embedded in other resources."""

    id: str
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)
