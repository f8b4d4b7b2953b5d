"""Messages relayed by gateway devices, kept here for per-user cleanup and stats."""

from datetime import datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from smsgate.infrastructure.persistence.database import Base
from smsgate.infrastructure.persistence.models.columns import created_at, id_column, reference

SMS_SENT = "sent"
SMS_RECEIVED = "received"


class SMSModel(Base):
    """One message. ``direction`` is :data:`SMS_SENT` or :data:`SMS_RECEIVED`."""

    __tablename__ = "sms"

    id: Mapped[str] = id_column()
    user_id: Mapped[str] = reference("users.id")
    device_id: Mapped[str | None] = reference("devices.id", nullable=True)
    direction: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    phone_number: Mapped[str | None] = mapped_column(String(32))
    message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = created_at()

    def __repr__(self) -> str:
        return f"<SMS {self.id} {self.direction} user={self.user_id}>"
