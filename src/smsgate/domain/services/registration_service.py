"""User registration and login.

In invite-only mode the new user row and the invite use are written in the
same transaction: if the code cannot be consumed the user is rolled back and
no account exists.
"""

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from smsgate.core.config import Settings
from smsgate.core.logging import get_logger
from smsgate.domain.entities.user import UserRole
from smsgate.domain.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    SMSGateError,
    UnauthorizedError,
)
from smsgate.domain.services.invite_service import InviteService
from smsgate.infrastructure.auth.jwt_service import JWTService
from smsgate.infrastructure.auth.password_hasher import (
    hash_password,
    needs_rehash,
    verify_password,
)
from smsgate.infrastructure.persistence.models import UserModel
from smsgate.infrastructure.persistence.repositories import UserRepository
from smsgate.infrastructure.services.turnstile_service import TurnstileService

logger = get_logger(__name__)


@dataclass(frozen=True)
class RegistrationData:
    """Validated registration input."""

    name: str
    email: str
    password: str
    phone: str | None = None
    turnstile_token: str | None = None
    invite_code: str | None = None


@dataclass(frozen=True)
class AuthResult:
    """A user together with a freshly issued access token."""

    user: UserModel
    access_token: str
    expires_in: int


class RegistrationService:
    """Service for account registration and password login."""

    def __init__(
        self,
        session: AsyncSession,
        settings: Settings,
        jwt_service: JWTService | None = None,
        turnstile: TurnstileService | None = None,
    ) -> None:
        """Initialize the registration service.

        Args:
            session: SQLAlchemy async session. The service commits on success.
            settings: Application settings.
            jwt_service: Token issuer. Built from settings if not given.
            turnstile: Bot verifier. Built from settings if not given.
        """
        self.session = session
        self.settings = settings
        self.jwt_service = jwt_service or JWTService.from_settings(settings)
        self.turnstile = turnstile or TurnstileService(settings)
        self.user_repo = UserRepository(session)
        self.invites = InviteService(session, settings)

    async def register(self, data: RegistrationData, remote_ip: str | None = None) -> AuthResult:
        """Register a new regular user.

        Args:
            data: Registration input.
            remote_ip: Client IP forwarded to bot verification.

        Returns:
            AuthResult for the new user.

        Raises:
            BotVerificationError: If bot verification failed.
            InvalidInputError: If invite-only mode is on and no code was given.
            ConflictError: If the email address is taken.
            InviteInvalidError: If the invite code cannot be consumed.
        """
        await self.turnstile.verify(data.turnstile_token, remote_ip=remote_ip)

        invite_only = self.invites.is_invite_only_mode()
        if invite_only and not (data.invite_code and data.invite_code.strip()):
            raise InvalidInputError("An invite code is required to register")

        email = data.email.strip().lower()
        if await self.user_repo.email_exists(email):
            raise ConflictError("A user with this email already exists")

        try:
            user = await self.user_repo.create(
                UserModel(
                    name=data.name.strip(),
                    email=email,
                    phone=data.phone,
                    password_hash=hash_password(data.password),
                    role=UserRole.REGULAR.value,
                    is_banned=False,
                    email_verified=False,
                )
            )
            if invite_only:
                await self.invites.validate_and_consume(data.invite_code, user.id)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("A user with this email already exists") from e
        except SMSGateError:
            await self.session.rollback()
            raise

        logger.info("User registered", user_id=user.id, email=email, invite_only=invite_only)
        return self._issue(user)

    async def login(
        self,
        email: str,
        password: str,
        turnstile_token: str | None = None,
        remote_ip: str | None = None,
    ) -> AuthResult:
        """Authenticate with email and password.

        Raises:
            BotVerificationError: If bot verification failed.
            UnauthorizedError: If the email or password is wrong.
            ForbiddenError: If the user is banned.
        """
        await self.turnstile.verify(turnstile_token, remote_ip=remote_ip)

        user = await self.user_repo.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Login failed", email=email.strip().lower())
            raise UnauthorizedError("Invalid credentials")

        if user.is_banned:
            logger.warning("Banned user attempted login", user_id=user.id)
            raise ForbiddenError("Your account has been banned")

        if needs_rehash(user.password_hash):
            user.password_hash = hash_password(password)

        await self.user_repo.update_last_login(user)
        await self.session.commit()

        logger.info("User logged in", user_id=user.id)
        return self._issue(user)

    def _issue(self, user: UserModel) -> AuthResult:
        token = self.jwt_service.create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role,
        )
        return AuthResult(
            user=user,
            access_token=token,
            expires_in=self.jwt_service.get_expires_in(),
        )
