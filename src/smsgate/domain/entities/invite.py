"""Invite entity rules.

An invite code grants permission to complete registration. It may be used a
bounded number of times before it expires or is revoked by an administrator.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class InviteFailureReason(str, Enum):
    """Why an invite code cannot be consumed, in evaluation order."""

    INVALID_CODE = "invalid_code"
    REVOKED = "revoked"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"


def normalize_code(code: str) -> str:
    """Normalize a submitted code for lookup.

    Codes are stored upper-cased, so lookups are case-insensitive.
    """
    return code.strip().upper()


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    SQLite drops tzinfo on the way back, so naive values are treated as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class InviteState:
    """The fields that decide whether an invite can be consumed."""

    is_revoked: bool
    expires_at: datetime
    current_uses: int
    max_uses: int

    @classmethod
    def of(cls, invite) -> "InviteState":
        """Snapshot the usability fields of an invite model."""
        return cls(
            is_revoked=invite.is_revoked,
            expires_at=as_utc(invite.expires_at),
            current_uses=invite.current_uses,
            max_uses=invite.max_uses,
        )

    def failure_reason(self, now: datetime | None = None) -> InviteFailureReason | None:
        """Return the first failed check, or None if the invite is usable.

        Checks run in a fixed order: revoked, expired, exhausted.
        """
        now = now or datetime.now(timezone.utc)
        if self.is_revoked:
            return InviteFailureReason.REVOKED
        if self.expires_at < now:
            return InviteFailureReason.EXPIRED
        if self.current_uses >= self.max_uses:
            return InviteFailureReason.EXHAUSTED
        return None
