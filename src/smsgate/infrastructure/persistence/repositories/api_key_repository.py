"""Data access for API keys."""

from typing import Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from smsgate.infrastructure.persistence.database import utcnow
from smsgate.infrastructure.persistence.models.api_key import APIKeyModel


class APIKeyRepository:
    """Reads and writes ``api_keys`` rows.

    Lookups used for authentication only ever return non-revoked keys; the
    management lookups scope every query to the owning user.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, api_key: APIKeyModel) -> APIKeyModel:
        self.session.add(api_key)
        await self.session.flush()
        return api_key

    async def get_for_user(self, key_id: str, user_id: str) -> APIKeyModel | None:
        """Fetch a key only if ``user_id`` owns it."""
        result = await self.session.execute(
            select(APIKeyModel).where(
                APIKeyModel.id == key_id,
                APIKeyModel.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_active_by_prefix(self, key_prefix: str) -> Sequence[APIKeyModel]:
        """Candidate keys for a presented secret.

        Args:
            key_prefix: Leading characters of the presented key.

        Returns:
            Non-revoked keys whose stored prefix matches. Usually one.
        """
        result = await self.session.execute(
            select(APIKeyModel).where(
                APIKeyModel.key_prefix == key_prefix,
                APIKeyModel.revoked_at.is_(None),
            )
        )
        return result.scalars().all()

    async def list_all_by_user(self, user_id: str) -> Sequence[APIKeyModel]:
        """Every key a user ever created, newest first, revoked ones included."""
        result = await self.session.execute(
            select(APIKeyModel)
            .where(APIKeyModel.user_id == user_id)
            .order_by(APIKeyModel.created_at.desc(), APIKeyModel.id.desc())
        )
        return result.scalars().all()

    async def update_last_used(self, api_key: APIKeyModel) -> None:
        api_key.last_used_at = utcnow()
        await self.session.flush()

    async def revoke(self, api_key: APIKeyModel) -> APIKeyModel:
        """Stamp ``revoked_at``. A key that is already revoked keeps its original stamp."""
        if api_key.revoked_at is None:
            api_key.revoked_at = utcnow()
            await self.session.flush()
        return api_key

    async def delete(self, api_key: APIKeyModel) -> None:
        await self.session.delete(api_key)
        await self.session.flush()

    async def delete_by_user(self, user_id: str) -> int:
        """Bulk delete a user's keys and return how many went."""
        result = await self.session.execute(
            delete(APIKeyModel)
            .where(APIKeyModel.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
