"""Pydantic schemas for admin endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from smsgate.domain.entities.user import UserRole


class RoleUpdateRequest(BaseModel):
    """Request schema for changing a user's role."""

    role: UserRole = Field(..., description="New role (ADMIN or REGULAR)")


class StatsResponse(BaseModel):
    """Platform-wide counters."""

    total_users: int
    active_users: int
    banned_users: int
    admin_users: int
    total_devices: int
    total_sms_sent: int
    total_sms_received: int
    total_invites: int
    active_invites: int

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    """Generic acknowledgement."""

    message: str
