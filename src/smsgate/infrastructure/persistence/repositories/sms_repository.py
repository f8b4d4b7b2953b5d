"""SMS repository for the back-office counters and user cascade."""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from smsgate.infrastructure.persistence.models import SMSModel


class SMSRepository:
    """Repository for message database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, sms: SMSModel) -> SMSModel:
        """Record a message."""
        self.session.add(sms)
        await self.session.flush()
        return sms

    async def count_by_direction(self, direction: str) -> int:
        """Count messages in one direction (``sent`` or ``received``)."""
        result = await self.session.execute(
            select(func.count(SMSModel.id)).where(SMSModel.direction == direction)
        )
        return result.scalar_one() or 0

    async def delete_by_user(self, user_id: str) -> int:
        """Delete every message owned by a user.

        Returns:
            Number of deleted messages.
        """
        result = await self.session.execute(
            delete(SMSModel)
            .where(SMSModel.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
