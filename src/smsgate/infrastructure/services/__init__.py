"""Infrastructure services: token generation, bot verification, access logs."""

from smsgate.infrastructure.services.access_log_service import (
    AccessLogEntry,
    AccessLogRecorder,
)
from smsgate.infrastructure.services.token_service import TokenService, token_service
from smsgate.infrastructure.services.turnstile_service import TurnstileService

__all__ = [
    "AccessLogEntry",
    "AccessLogRecorder",
    "TokenService",
    "TurnstileService",
    "token_service",
]
