"""Trail of authenticated requests, written off the request path."""

from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from smsgate.infrastructure.persistence.database import Base
from smsgate.infrastructure.persistence.models.columns import created_at, id_column, reference


class AccessLogModel(Base):
    __tablename__ = "access_logs"

    id: Mapped[str] = id_column()
    user_id: Mapped[str] = reference("users.id")
    # set when the request authenticated with an API key
    api_key_id: Mapped[str | None] = reference(
        "api_keys.id", ondelete="SET NULL", nullable=True, index=False
    )
    method: Mapped[str] = mapped_column(String(10), nullable=False)
    path: Mapped[str] = mapped_column(String(2048), nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String(64))
    user_agent: Mapped[str | None] = mapped_column(String(512))
    created_at: Mapped[datetime] = created_at()
