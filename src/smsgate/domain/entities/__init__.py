"""Domain entities and value rules."""

from smsgate.domain.entities.invite import (
    InviteFailureReason,
    InviteState,
    as_utc,
    normalize_code,
)
from smsgate.domain.entities.user import UserRole

__all__ = [
    "InviteFailureReason",
    "InviteState",
    "UserRole",
    "as_utc",
    "normalize_code",
]
