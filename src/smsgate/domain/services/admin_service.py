"""Administrative user management and platform statistics."""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from smsgate.core.logging import get_logger
from smsgate.domain.entities.user import UserRole
from smsgate.domain.exceptions import ConflictError, NotFoundError
from smsgate.infrastructure.auth.password_hasher import hash_password
from smsgate.infrastructure.persistence.models import SMS_RECEIVED, SMS_SENT, UserModel
from smsgate.infrastructure.persistence.repositories import (
    AccessLogRepository,
    APIKeyRepository,
    DeviceRepository,
    InviteRepository,
    SMSRepository,
    UserRepository,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class PlatformStats:
    """Aggregate counters shown on the admin dashboard."""

    total_users: int
    active_users: int
    banned_users: int
    admin_users: int
    total_devices: int
    total_sms_sent: int
    total_sms_received: int
    total_invites: int
    active_invites: int


class AdminService:
    """Service for user administration."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the admin service.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session
        self.user_repo = UserRepository(session)
        self.invite_repo = InviteRepository(session)
        self.api_key_repo = APIKeyRepository(session)
        self.device_repo = DeviceRepository(session)
        self.sms_repo = SMSRepository(session)
        self.access_log_repo = AccessLogRepository(session)

    async def list_users(self) -> list[UserModel]:
        """List all users, newest first."""
        return await self.user_repo.list_all()

    async def get_user(self, user_id: str) -> UserModel:
        """Get a user by ID.

        Raises:
            NotFoundError: If the user does not exist.
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def update_role(self, user_id: str, role: UserRole) -> UserModel:
        """Change a user's role.

        Raises:
            NotFoundError: If the user does not exist.
            ConflictError: If the user already holds the role.
        """
        user = await self.get_user(user_id)
        if user.role == role.value:
            raise ConflictError(f"User already has role {role.value}")

        previous = user.role
        user.role = role.value
        await self.session.flush()
        logger.info("User role updated", user_id=user_id, old_role=previous, new_role=role.value)
        return user

    async def ban(self, user_id: str) -> UserModel:
        """Ban a user.

        Raises:
            NotFoundError: If the user does not exist.
            ConflictError: If the user is already banned.
        """
        user = await self.get_user(user_id)
        if user.is_banned:
            raise ConflictError("User is already banned")

        user.is_banned = True
        await self.session.flush()
        logger.info("User banned", user_id=user_id)
        return user

    async def unban(self, user_id: str) -> UserModel:
        """Lift a ban.

        Raises:
            NotFoundError: If the user does not exist.
            ConflictError: If the user is not banned.
        """
        user = await self.get_user(user_id)
        if not user.is_banned:
            raise ConflictError("User is not banned")

        user.is_banned = False
        await self.session.flush()
        logger.info("User unbanned", user_id=user_id)
        return user

    async def delete_user(self, user_id: str) -> None:
        """Delete a user together with everything they own.

        Messages, devices, API keys and access logs go with the user. Invites
        the user issued or consumed are kept with the reference cleared.

        Raises:
            NotFoundError: If the user does not exist.
        """
        user = await self.get_user(user_id)

        sms_deleted = await self.sms_repo.delete_by_user(user_id)
        devices_deleted = await self.device_repo.delete_by_user(user_id)
        await self.access_log_repo.delete_by_user(user_id)
        keys_deleted = await self.api_key_repo.delete_by_user(user_id)
        await self.invite_repo.detach_user(user_id)

        self.session.expunge(user)
        await self.user_repo.delete(user_id)

        logger.info(
            "User deleted",
            user_id=user_id,
            sms_deleted=sms_deleted,
            devices_deleted=devices_deleted,
            api_keys_deleted=keys_deleted,
        )

    async def get_stats(self) -> PlatformStats:
        """Collect platform-wide counters."""
        banned = await self.user_repo.count_banned(True)
        total = await self.user_repo.count_all()
        return PlatformStats(
            total_users=total,
            active_users=total - banned,
            banned_users=banned,
            admin_users=await self.user_repo.count_by_role(UserRole.ADMIN),
            total_devices=await self.device_repo.count_all(),
            total_sms_sent=await self.sms_repo.count_by_direction(SMS_SENT),
            total_sms_received=await self.sms_repo.count_by_direction(SMS_RECEIVED),
            total_invites=await self.invite_repo.count_all(),
            active_invites=await self.invite_repo.count_active(),
        )


async def ensure_admin_user(
    session: AsyncSession,
    email: str,
    password: str,
    name: str = "Administrator",
) -> tuple[UserModel, bool]:
    """Create an admin user, or promote an existing user to admin.

    The existing user's password is left untouched.

    Args:
        session: SQLAlchemy async session. The caller commits.
        email: Admin email address.
        password: Password for a newly created admin.
        name: Display name for a newly created admin.

    Returns:
        Tuple of (user, created).
    """
    repo = UserRepository(session)
    user = await repo.get_by_email(email)
    if user is not None:
        if not user.is_admin:
            user.role = UserRole.ADMIN.value
            await session.flush()
            logger.info("Existing user promoted to admin", user_id=user.id)
        return user, False

    user = await repo.create(
        UserModel(
            name=name,
            email=email.strip().lower(),
            password_hash=hash_password(password),
            role=UserRole.ADMIN.value,
            is_banned=False,
            email_verified=True,
        )
    )
    return user, True
