"""Domain services for smsgate."""

from smsgate.domain.services.admin_service import (
    AdminService,
    PlatformStats,
    ensure_admin_user,
)
from smsgate.domain.services.invite_service import InviteService
from smsgate.domain.services.registration_service import (
    AuthResult,
    RegistrationData,
    RegistrationService,
)

__all__ = [
    "AdminService",
    "AuthResult",
    "InviteService",
    "PlatformStats",
    "RegistrationData",
    "RegistrationService",
    "ensure_admin_user",
]
