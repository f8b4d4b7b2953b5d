"""API keys.

A key is stored as its argon2 hash plus a short plaintext prefix. The prefix
is indexed so that authenticating a presented key only hash-verifies the
few rows sharing its prefix.
"""

from datetime import datetime

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from smsgate.infrastructure.persistence.database import Base
from smsgate.infrastructure.persistence.models.columns import (
    created_at,
    id_column,
    reference,
    timestamp,
)


class APIKeyModel(Base):
    __tablename__ = "api_keys"
    __table_args__ = (Index("ix_api_keys_prefix_revoked", "key_prefix", "revoked_at"),)

    id: Mapped[str] = id_column()
    user_id: Mapped[str] = reference("users.id")
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    key_prefix: Mapped[str] = mapped_column(String(32), nullable=False)
    key_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # null while the key is usable
    revoked_at: Mapped[datetime | None] = timestamp()
    last_used_at: Mapped[datetime | None] = timestamp()
    created_at: Mapped[datetime] = created_at()

    user: Mapped["UserModel"] = relationship(back_populates="api_keys")  # noqa: F821

    @property
    def is_active(self) -> bool:
        return self.revoked_at is None

    def __repr__(self) -> str:
        return f"<APIKey {self.id} {self.name!r} user={self.user_id}>"
