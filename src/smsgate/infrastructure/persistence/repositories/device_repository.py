"""Device repository for the back-office counters and user cascade."""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from smsgate.infrastructure.persistence.models import DeviceModel


class DeviceRepository:
    """Repository for device database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, device: DeviceModel) -> DeviceModel:
        """Create a new device."""
        self.session.add(device)
        await self.session.flush()
        return device

    async def count_all(self) -> int:
        """Count all registered devices."""
        result = await self.session.execute(select(func.count(DeviceModel.id)))
        return result.scalar_one() or 0

    async def delete_by_user(self, user_id: str) -> int:
        """Delete every device owned by a user.

        Returns:
            Number of deleted devices.
        """
        result = await self.session.execute(
            delete(DeviceModel)
            .where(DeviceModel.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
