"""Queries over the ``users`` table.

Emails are stored lowercased; every lookup here normalizes its argument the
same way so callers can pass whatever the client sent.
"""

from sqlalchemy import ColumnElement, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from smsgate.domain.entities.user import UserRole
from smsgate.infrastructure.persistence.database import utcnow
from smsgate.infrastructure.persistence.models import UserModel


def _email_key(email: str) -> str:
    return email.strip().lower()


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, user: UserModel) -> UserModel:
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_id(self, user_id: str) -> UserModel | None:
        return await self.session.get(UserModel, user_id)

    async def get_by_email(self, email: str) -> UserModel | None:
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == _email_key(email))
        )
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        result = await self.session.execute(
            select(UserModel.id).where(UserModel.email == _email_key(email)).limit(1)
        )
        return result.first() is not None

    async def list_all(self) -> list[UserModel]:
        """Every user, most recently registered first."""
        result = await self.session.execute(
            select(UserModel).order_by(UserModel.created_at.desc(), UserModel.id)
        )
        return list(result.scalars())

    async def update_last_login(self, user: UserModel) -> UserModel:
        user.last_login_at = utcnow()
        await self.session.flush()
        return user

    async def delete(self, user_id: str) -> bool:
        """Remove the row. Dependent rows must already be gone or detached.

        Returns:
            Whether a user was deleted.
        """
        result = await self.session.execute(
            delete(UserModel)
            .where(UserModel.id == user_id)
            .execution_options(synchronize_session=False)
        )
        await self.session.flush()
        return result.rowcount > 0

    async def _count(self, *criteria: ColumnElement[bool]) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(UserModel).where(*criteria)
        )
        return result.scalar_one()

    async def count_all(self) -> int:
        return await self._count()

    async def count_banned(self, banned: bool = True) -> int:
        return await self._count(UserModel.is_banned == banned)

    async def count_by_role(self, role: UserRole) -> int:
        return await self._count(UserModel.role == role.value)
