"""Dual-mode request authentication.

A request may authenticate with either:
- ``Authorization: Bearer <jwt>``
- an API key in the ``x-api-key`` header or the ``apiKey`` query parameter

The bearer token wins when both are present. Every failure raises the same
:class:`AuthenticationError`; the specific reason is only logged.
"""

from typing import Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from smsgate.core.config import Settings
from smsgate.core.logging import get_logger
from smsgate.infrastructure.auth.api_key_service import APIKeyService
from smsgate.infrastructure.auth.jwt_service import (
    InvalidTokenError,
    JWTService,
    TokenExpiredError,
)
from smsgate.infrastructure.auth.password_hasher import verify_password
from smsgate.infrastructure.auth.token_types import (
    ApiKeyCredential,
    AuthenticatedUser,
    BearerCredential,
    Credential,
    NoCredential,
    TokenType,
)
from smsgate.infrastructure.persistence.models import UserModel
from smsgate.infrastructure.persistence.repositories import (
    APIKeyRepository,
    UserRepository,
)

logger = get_logger(__name__)


class AuthenticationError(Exception):
    """Raised when a request cannot be authenticated."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def extract_credential(
    headers: Mapping[str, str],
    query_params: Mapping[str, str],
    settings: Settings,
) -> Credential:
    """Resolve the request's credential.

    Args:
        headers: Request headers (looked up case-insensitively).
        query_params: Request query parameters.
        settings: Application settings naming the API-key header and parameter.

    Returns:
        The credential the request presented.
    """
    lowered = {key.lower(): value for key, value in headers.items()}

    auth_header = lowered.get("authorization")
    if auth_header:
        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return BearerCredential(token=token.strip())

    api_key = lowered.get(settings.api_key_header.lower()) or query_params.get(
        settings.api_key_query_param
    )
    if api_key:
        return ApiKeyCredential(key=api_key.strip())

    if auth_header:
        return NoCredential(reason="unsupported_authorization_scheme")
    return NoCredential(reason="missing_credential")


class Authenticator:
    """Turns a credential into an :class:`AuthenticatedUser`."""

    def __init__(
        self,
        session: AsyncSession,
        settings: Settings,
        jwt_service: JWTService | None = None,
    ) -> None:
        """Initialize the authenticator.

        Args:
            session: Database session used to resolve users and keys.
            settings: Application settings.
            jwt_service: Token verifier. Built from settings if not given.
        """
        self.session = session
        self.settings = settings
        self.jwt_service = jwt_service or JWTService.from_settings(settings)
        self.users = UserRepository(session)
        self.api_keys = APIKeyRepository(session)

    async def authenticate(self, credential: Credential) -> AuthenticatedUser:
        """Authenticate a credential.

        Args:
            credential: The credential extracted from the request.

        Returns:
            AuthenticatedUser: The validated principal.

        Raises:
            AuthenticationError: If authentication fails for any reason.
        """
        if isinstance(credential, BearerCredential):
            return await self._authenticate_bearer(credential.token)
        if isinstance(credential, ApiKeyCredential):
            return await self._authenticate_api_key(credential.key)

        if credential.reason == "unsupported_authorization_scheme":
            logger.warning("Authorization header is not a bearer token")
        else:
            logger.debug("No authentication credential presented")
        raise AuthenticationError(credential.reason)

    async def _authenticate_bearer(self, token: str) -> AuthenticatedUser:
        try:
            payload = self.jwt_service.validate_access_token(token)
        except TokenExpiredError as e:
            logger.debug("Bearer token expired")
            raise AuthenticationError("token_expired") from e
        except InvalidTokenError as e:
            logger.warning("Bearer token rejected", error=str(e))
            raise AuthenticationError("invalid_token") from e

        user = await self._load_user(payload["sub"])
        return self._principal(user, TokenType.JWT)

    async def _authenticate_api_key(self, key: str) -> AuthenticatedUser:
        prefix = APIKeyService.prefix_of(key, self.settings.api_key_prefix_length)
        candidates = await self.api_keys.list_active_by_prefix(prefix)

        for candidate in candidates:
            if verify_password(key, candidate.key_hash):
                user = await self._load_user(candidate.user_id)
                await self.api_keys.update_last_used(candidate)
                return self._principal(user, TokenType.API_KEY, api_key_id=candidate.id)

        logger.warning(
            "API key rejected",
            key_prefix=prefix,
            candidates=len(candidates),
        )
        raise AuthenticationError("invalid_api_key")

    async def _load_user(self, user_id: str) -> UserModel:
        user = await self.users.get_by_id(user_id)
        if user is None:
            logger.warning("Credential subject does not exist", user_id=user_id)
            raise AuthenticationError("unknown_subject")
        return user

    @staticmethod
    def _principal(
        user: UserModel,
        token_type: TokenType,
        api_key_id: str | None = None,
    ) -> AuthenticatedUser:
        return AuthenticatedUser(
            user_id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            token_type=token_type,
            api_key_id=api_key_id,
        )
