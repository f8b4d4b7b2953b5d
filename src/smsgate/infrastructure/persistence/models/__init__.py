"""SQLAlchemy models for smsgate.

Every model registers on ``Base.metadata``; importing this package is what
makes ``create_all`` and Alembic autogenerate see the full schema.
"""

from smsgate.infrastructure.persistence.models.access_log import AccessLogModel
from smsgate.infrastructure.persistence.models.api_key import APIKeyModel
from smsgate.infrastructure.persistence.models.device import DeviceModel
from smsgate.infrastructure.persistence.models.invite import InviteModel
from smsgate.infrastructure.persistence.models.sms import SMS_RECEIVED, SMS_SENT, SMSModel
from smsgate.infrastructure.persistence.models.user import UserModel

__all__ = [
    "AccessLogModel",
    "APIKeyModel",
    "DeviceModel",
    "InviteModel",
    "SMSModel",
    "SMS_RECEIVED",
    "SMS_SENT",
    "UserModel",
]
