"""Pydantic schemas for invite API endpoints."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from smsgate.domain.entities.invite import InviteFailureReason, InviteState, as_utc
from smsgate.infrastructure.api.schemas.user_schemas import UserSummary


class InviteStatus(str, Enum):
    """Derived invite status."""

    ACTIVE = "active"
    REVOKED = "revoked"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"


_STATUS_BY_FAILURE = {
    InviteFailureReason.REVOKED: InviteStatus.REVOKED,
    InviteFailureReason.EXPIRED: InviteStatus.EXPIRED,
    InviteFailureReason.EXHAUSTED: InviteStatus.EXHAUSTED,
}


class InviteCreateRequest(BaseModel):
    """Request schema for issuing an invite."""

    max_uses: int | None = Field(None, ge=1, description="Registrations allowed (default 1)")
    expires_in_days: int | None = Field(None, ge=1, description="Lifetime in days (default 7)")
    note: str | None = Field(None, max_length=500, description="Optional admin note")


class InviteResponse(BaseModel):
    """Response schema for invite details."""

    id: str = Field(..., description="Invite ID")
    code: str = Field(..., description="Invite code")
    max_uses: int
    current_uses: int
    expires_at: datetime
    note: str | None = None
    is_revoked: bool
    status: InviteStatus = Field(..., description="Derived usability status")
    created_by: str | None = None
    used_by: str | None = None
    creator: UserSummary | None = None
    consumer: UserSummary | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_model(cls, invite) -> "InviteResponse":
        """Build a response from an invite model with its relations loaded."""
        failure = InviteState.of(invite).failure_reason()
        return cls(
            id=invite.id,
            code=invite.code,
            max_uses=invite.max_uses,
            current_uses=invite.current_uses,
            expires_at=as_utc(invite.expires_at),
            note=invite.note,
            is_revoked=invite.is_revoked,
            status=_STATUS_BY_FAILURE.get(failure, InviteStatus.ACTIVE),
            created_by=invite.created_by,
            used_by=invite.used_by,
            creator=UserSummary.model_validate(invite.creator) if invite.creator else None,
            consumer=UserSummary.model_validate(invite.consumer) if invite.consumer else None,
            created_at=as_utc(invite.created_at),
        )


class InviteListResponse(BaseModel):
    """Response schema for a page of invites."""

    items: list[InviteResponse]
    total: int = Field(..., description="Total number of invites")


class InviteValidateRequest(BaseModel):
    """Request schema for checking an invite code."""

    code: str = Field(..., min_length=1, max_length=64)


class InviteValidateResponse(BaseModel):
    """Non-authoritative validity of an invite code."""

    valid: bool
