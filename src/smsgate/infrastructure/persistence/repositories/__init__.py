"""Persistence repositories for database operations."""

from smsgate.infrastructure.persistence.repositories.access_log_repository import (
    AccessLogRepository,
)
from smsgate.infrastructure.persistence.repositories.api_key_repository import (
    APIKeyRepository,
)
from smsgate.infrastructure.persistence.repositories.device_repository import (
    DeviceRepository,
)
from smsgate.infrastructure.persistence.repositories.invite_repository import (
    InviteRepository,
)
from smsgate.infrastructure.persistence.repositories.sms_repository import (
    SMSRepository,
)
from smsgate.infrastructure.persistence.repositories.user_repository import (
    UserRepository,
)

__all__ = [
    "AccessLogRepository",
    "APIKeyRepository",
    "DeviceRepository",
    "InviteRepository",
    "SMSRepository",
    "UserRepository",
]
