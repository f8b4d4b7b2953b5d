"""Repository for access log rows."""

from typing import Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from smsgate.infrastructure.persistence.models import AccessLogModel


class AccessLogRepository:
    """Repository for access log database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, entry: AccessLogModel) -> AccessLogModel:
        """Insert one access log row.

        Args:
            entry: Access log model to persist.

        Returns:
            The persisted model.
        """
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def list_by_user(self, user_id: str) -> Sequence[AccessLogModel]:
        """List access log rows for a user, newest first."""
        result = await self.session.execute(
            select(AccessLogModel)
            .where(AccessLogModel.user_id == user_id)
            .order_by(AccessLogModel.created_at.desc())
        )
        return result.scalars().all()

    async def delete_by_user(self, user_id: str) -> int:
        """Delete every access log row for a user."""
        result = await self.session.execute(
            delete(AccessLogModel)
            .where(AccessLogModel.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
