"""Invite codes.

In invite-only mode a code must be presented at registration. A code is
usable while it is not revoked, not past ``expires_at`` and has
``current_uses < max_uses``; consumption bumps ``current_uses`` in a single
conditional UPDATE (see ``InviteRepository.consume``).
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from smsgate.infrastructure.persistence.database import Base
from smsgate.infrastructure.persistence.models.columns import (
    created_at,
    flag,
    id_column,
    reference,
    timestamp,
    updated_at,
)


class InviteModel(Base):
    """An invite code.

    ``created_by`` and ``used_by`` survive the deletion of the users they
    point at as NULL. ``used_by`` only remembers the most recent consumer.
    """

    __tablename__ = "invites"
    __table_args__ = (
        CheckConstraint("max_uses >= 1", name="ck_invites_max_uses_positive"),
        CheckConstraint("current_uses >= 0", name="ck_invites_current_uses_non_negative"),
    )

    id: Mapped[str] = id_column()
    code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    created_by: Mapped[str | None] = reference(
        "users.id", ondelete="SET NULL", nullable=True, index=False
    )
    used_by: Mapped[str | None] = reference(
        "users.id", ondelete="SET NULL", nullable=True, index=False
    )
    max_uses: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    current_uses: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    expires_at: Mapped[datetime] = timestamp(nullable=False, index=True)
    note: Mapped[str | None] = mapped_column(String(500))
    is_revoked: Mapped[bool] = flag(False)
    created_at: Mapped[datetime] = created_at(index=True)
    updated_at: Mapped[datetime] = updated_at()

    creator: Mapped["UserModel"] = relationship(foreign_keys=[created_by])  # noqa: F821
    consumer: Mapped["UserModel"] = relationship(foreign_keys=[used_by])  # noqa: F821

    def __repr__(self) -> str:
        return f"<Invite {self.code} {self.current_uses}/{self.max_uses}>"
