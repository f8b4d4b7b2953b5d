"""Column factories shared by the models.

Each call returns a fresh ``mapped_column``; a column object cannot be
shared between tables.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from smsgate.infrastructure.persistence.database import utcnow

ID_LENGTH = 36


def new_id() -> str:
    return str(uuid.uuid4())


def id_column() -> Mapped[str]:
    return mapped_column(String(ID_LENGTH), primary_key=True, default=new_id)


def reference(target: str, *, ondelete: str = "CASCADE", nullable: bool = False, index: bool = True):
    """Foreign key column pointing at ``target`` (``"table.column"``)."""
    return mapped_column(
        String(ID_LENGTH),
        ForeignKey(target, ondelete=ondelete),
        nullable=nullable,
        index=index,
    )


def flag(default: bool) -> Mapped[bool]:
    return mapped_column(
        Boolean,
        nullable=False,
        default=default,
        server_default="1" if default else "0",
    )


def timestamp(*, nullable: bool = True, index: bool = False):
    """Timezone-aware timestamp with no default."""
    return mapped_column(DateTime(timezone=True), nullable=nullable, index=index)


def created_at(*, index: bool = False) -> Mapped[datetime]:
    return mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=index,
    )


def updated_at() -> Mapped[datetime]:
    return mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )
