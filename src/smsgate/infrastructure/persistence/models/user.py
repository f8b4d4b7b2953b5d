"""Accounts of the back-office: operators and the gateway users they manage."""

from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from smsgate.domain.entities.user import UserRole
from smsgate.infrastructure.persistence.database import Base
from smsgate.infrastructure.persistence.models.columns import (
    created_at,
    flag,
    id_column,
    timestamp,
    updated_at,
)


class UserModel(Base):
    """A registered account.

    ``email`` is unique and always stored lowercased. ``role`` holds a
    :class:`UserRole` value and is the only source of admin rights; whatever
    role an old bearer token claims is ignored.
    """

    __tablename__ = "users"

    id: Mapped[str] = id_column()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(32))
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        index=True,
        default=UserRole.REGULAR.value,
        server_default=UserRole.REGULAR.value,
    )
    is_banned: Mapped[bool] = flag(False)
    email_verified: Mapped[bool] = flag(False)
    last_login_at: Mapped[datetime | None] = timestamp()
    created_at: Mapped[datetime] = created_at()
    updated_at: Mapped[datetime] = updated_at()

    api_keys: Mapped[list["APIKeyModel"]] = relationship(  # noqa: F821
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email} {self.role}>"
