"""Invite repository for database operations."""

from datetime import datetime, timezone

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from smsgate.infrastructure.persistence.models import InviteModel


class InviteRepository:
    """Repository for invite database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, invite: InviteModel) -> InviteModel:
        """Create a new invite.

        Args:
            invite: Invite model to create.

        Returns:
            Created invite model.

        Raises:
            IntegrityError: If the code collides with an existing invite.
        """
        self.session.add(invite)
        await self.session.flush()
        return invite

    async def get_by_id(self, invite_id: str) -> InviteModel | None:
        """Get an invite by ID with its creator and consumer loaded.

        Args:
            invite_id: Invite ID (UUID string).

        Returns:
            Invite model if found, None otherwise.
        """
        result = await self.session.execute(
            select(InviteModel)
            .options(selectinload(InviteModel.creator), selectinload(InviteModel.consumer))
            .where(InviteModel.id == invite_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_code(self, code: str) -> InviteModel | None:
        """Get an invite by its (already normalized) code.

        The row is always re-read from the database so that counters updated
        by a bulk UPDATE are visible.

        Args:
            code: Upper-case invite code.

        Returns:
            Invite model if found, None otherwise.
        """
        result = await self.session.execute(
            select(InviteModel)
            .where(InviteModel.code == code)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_paginated(self, limit: int, offset: int) -> tuple[list[InviteModel], int]:
        """List invites newest first.

        Args:
            limit: Maximum number of invites to return.
            offset: Number of invites to skip.

        Returns:
            Tuple of (invites for the page, total invite count).
        """
        total = await self.count_all()
        result = await self.session.execute(
            select(InviteModel)
            .options(selectinload(InviteModel.creator), selectinload(InviteModel.consumer))
            .order_by(InviteModel.created_at.desc(), InviteModel.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all()), total

    async def revoke(self, invite: InviteModel) -> InviteModel:
        """Mark an invite as revoked. Revoking twice is a no-op.

        Args:
            invite: Invite model to revoke.

        Returns:
            The updated invite model.
        """
        if not invite.is_revoked:
            invite.is_revoked = True
            await self.session.flush()
        return invite

    async def delete(self, invite_id: str) -> bool:
        """Hard delete an invite.

        Args:
            invite_id: ID of the invite to delete.

        Returns:
            True if the invite was deleted, False if not found.
        """
        result = await self.session.execute(
            delete(InviteModel).where(InviteModel.id == invite_id)
        )
        await self.session.flush()
        return result.rowcount > 0

    async def consume(self, code: str, user_id: str, now: datetime | None = None) -> bool:
        """Atomically take one use of an invite.

        A single conditional UPDATE increments ``current_uses`` only while the
        invite is unrevoked, unexpired and below ``max_uses``. The database
        serializes concurrent updates of the same row, so at most ``max_uses``
        calls can ever succeed.

        Args:
            code: Upper-case invite code.
            user_id: ID of the user consuming the invite.
            now: Reference time for the expiry check.

        Returns:
            True if exactly one use was taken, False otherwise.
        """
        now = now or datetime.now(timezone.utc)
        result = await self.session.execute(
            update(InviteModel)
            .where(
                and_(
                    InviteModel.code == code,
                    InviteModel.is_revoked.is_(False),
                    InviteModel.expires_at >= now,
                    InviteModel.current_uses < InviteModel.max_uses,
                )
            )
            .values(
                current_uses=InviteModel.current_uses + 1,
                used_by=user_id,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def detach_user(self, user_id: str) -> None:
        """Clear issuer and consumer references to a user about to be deleted.

        Args:
            user_id: ID of the user.
        """
        await self.session.execute(
            update(InviteModel)
            .where(InviteModel.created_by == user_id)
            .values(created_by=None)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(
            update(InviteModel)
            .where(InviteModel.used_by == user_id)
            .values(used_by=None)
            .execution_options(synchronize_session=False)
        )

    async def count_all(self) -> int:
        """Count all invites."""
        result = await self.session.execute(select(func.count(InviteModel.id)))
        return result.scalar_one() or 0

    async def count_active(self, now: datetime | None = None) -> int:
        """Count invites that could still be consumed right now."""
        now = now or datetime.now(timezone.utc)
        result = await self.session.execute(
            select(func.count(InviteModel.id)).where(
                and_(
                    InviteModel.is_revoked.is_(False),
                    InviteModel.expires_at >= now,
                    InviteModel.current_uses < InviteModel.max_uses,
                )
            )
        )
        return result.scalar_one() or 0
