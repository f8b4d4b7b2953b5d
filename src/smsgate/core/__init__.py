"""Process-wide plumbing shared by every layer."""

from smsgate.core.config import Settings, get_settings
from smsgate.core.logging import configure_logging, get_logger

__all__ = ["Settings", "configure_logging", "get_logger", "get_settings"]
