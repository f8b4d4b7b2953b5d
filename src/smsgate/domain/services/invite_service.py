"""Invite lifecycle management.

Admins issue, list, revoke and delete invite codes. Registration consumes a
code through :meth:`InviteService.validate_and_consume`, which is the only
authoritative check: it takes one use with a single conditional UPDATE so
concurrent registrations can never exceed ``max_uses``.
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from smsgate.core.config import Settings
from smsgate.core.logging import get_logger
from smsgate.domain.entities.invite import (
    InviteFailureReason,
    InviteState,
    normalize_code,
)
from smsgate.domain.exceptions import (
    ConflictError,
    InvalidInputError,
    InviteInvalidError,
    NotFoundError,
)
from smsgate.infrastructure.persistence.models import InviteModel
from smsgate.infrastructure.persistence.repositories import InviteRepository
from smsgate.infrastructure.services.token_service import token_service

logger = get_logger(__name__)

CODE_ATTEMPTS = 2


class InviteService:
    """Service for the invite code lifecycle."""

    def __init__(self, session: AsyncSession, settings: Settings) -> None:
        """Initialize the invite service.

        Args:
            session: SQLAlchemy async session.
            settings: Application settings (registration mode and defaults).
        """
        self.session = session
        self.settings = settings
        self.repository = InviteRepository(session)

    def is_invite_only_mode(self) -> bool:
        """Check whether registration currently requires an invite code."""
        return self.settings.is_invite_only

    async def create(
        self,
        issuer_id: str | None,
        max_uses: int | None = None,
        expires_in_days: int | None = None,
        note: str | None = None,
    ) -> InviteModel:
        """Issue a new invite code.

        Args:
            issuer_id: ID of the admin issuing the invite (None from the CLI).
            max_uses: How many registrations the code allows. Defaults to 1.
            expires_in_days: Lifetime in days. Defaults to 7.
            note: Optional free-form note.

        Returns:
            The created invite with its issuer loaded.

        Raises:
            InvalidInputError: If a limit is not a positive integer.
            ConflictError: If a unique code could not be generated.
            IntegrityError: If the insert fails for any reason other than a
                duplicate code.
        """
        if max_uses is None:
            max_uses = self.settings.invite_default_max_uses
        if expires_in_days is None:
            expires_in_days = self.settings.invite_default_expires_in_days

        if max_uses < 1:
            raise InvalidInputError("max_uses must be a positive integer")
        if expires_in_days < 1:
            raise InvalidInputError("expires_in_days must be a positive integer")

        expires_at = datetime.now(timezone.utc) + timedelta(days=expires_in_days)

        for attempt in range(1, CODE_ATTEMPTS + 1):
            code = token_service.generate_invite_code()
            invite = InviteModel(
                code=code,
                created_by=issuer_id,
                max_uses=max_uses,
                current_uses=0,
                expires_at=expires_at,
                note=note,
                is_revoked=False,
            )
            try:
                await self.repository.create(invite)
            except IntegrityError:
                await self.session.rollback()
                if await self.repository.get_by_code(code) is None:
                    # not the code: a foreign key or another constraint failed
                    raise
                logger.warning("Invite code collision, regenerating", attempt=attempt)
                continue

            logger.info(
                "Invite created",
                invite_id=invite.id,
                created_by=issuer_id,
                max_uses=max_uses,
                expires_at=expires_at.isoformat(),
            )
            return await self.get_by_id(invite.id)

        raise ConflictError("Could not generate a unique invite code, please retry")

    async def list(self, limit: int = 50, offset: int = 0) -> tuple[list[InviteModel], int]:
        """List invites newest first.

        Returns:
            Tuple of (page of invites, total invite count).
        """
        return await self.repository.list_paginated(limit=limit, offset=offset)

    async def get_by_id(self, invite_id: str) -> InviteModel:
        """Get an invite by ID.

        Raises:
            NotFoundError: If the invite does not exist.
        """
        invite = await self.repository.get_by_id(invite_id)
        if invite is None:
            raise NotFoundError("Invite not found")
        return invite

    async def revoke(self, invite_id: str) -> InviteModel:
        """Revoke an invite. Revoking an already revoked invite succeeds.

        Raises:
            NotFoundError: If the invite does not exist.
        """
        invite = await self.get_by_id(invite_id)
        await self.repository.revoke(invite)
        logger.info("Invite revoked", invite_id=invite_id)
        return invite

    async def delete(self, invite_id: str) -> None:
        """Hard delete an invite.

        Raises:
            NotFoundError: If the invite does not exist.
        """
        if not await self.repository.delete(invite_id):
            raise NotFoundError("Invite not found")
        logger.info("Invite deleted", invite_id=invite_id)

    async def validate_and_consume(self, code: str, consumer_user_id: str) -> InviteModel:
        """Take one use of an invite for a newly registered user.

        Runs in the caller's transaction so a failure here rolls the
        registration back with it.

        Args:
            code: Submitted code (case-insensitive).
            consumer_user_id: ID of the user being registered.

        Returns:
            The invite after the use was taken.

        Raises:
            InviteInvalidError: If the code is unknown, revoked, expired or
                exhausted, checked in that order.
        """
        normalized = normalize_code(code)
        now = datetime.now(timezone.utc)

        if await self.repository.consume(normalized, consumer_user_id, now=now):
            invite = await self.repository.get_by_code(normalized)
            logger.info(
                "Invite consumed",
                invite_id=invite.id,
                used_by=consumer_user_id,
                current_uses=invite.current_uses,
                max_uses=invite.max_uses,
            )
            return invite

        reason = await self._failure_reason(normalized, now)
        logger.warning("Invite consumption rejected", reason=reason.value)
        raise InviteInvalidError(reason)

    async def validate_only(self, code: str) -> bool:
        """Check a code without consuming it.

        The answer may be stale by the time the code is used; only
        :meth:`validate_and_consume` decides.
        """
        invite = await self.repository.get_by_code(normalize_code(code))
        if invite is None:
            return False
        return InviteState.of(invite).failure_reason() is None

    async def _failure_reason(self, code: str, now: datetime) -> InviteFailureReason:
        invite = await self.repository.get_by_code(code)
        if invite is None:
            return InviteFailureReason.INVALID_CODE
        # A concurrent consumer may have taken the last use between the
        # UPDATE and this read, so "usable" here still means exhausted.
        return InviteState.of(invite).failure_reason(now) or InviteFailureReason.EXHAUSTED
