"""API key management.

Keys look like ``sg_`` followed by 48 hex characters. Only an Argon2 hash of
the full key is stored, next to its first characters which serve as an
indexed lookup prefix.
"""

from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from smsgate.core.logging import get_logger
from smsgate.domain.exceptions import NotFoundError
from smsgate.infrastructure.auth.password_hasher import hash_password
from smsgate.infrastructure.persistence.models import APIKeyModel
from smsgate.infrastructure.persistence.repositories import APIKeyRepository
from smsgate.infrastructure.services.token_service import token_service

logger = get_logger(__name__)

KEY_PREFIX = "sg_"
KEY_RANDOM_BYTES = 24
DEFAULT_PREFIX_LENGTH = 17


class APIKeyService:
    """Service for issuing, listing and revoking a user's API keys."""

    def __init__(self, session: AsyncSession, prefix_length: int = DEFAULT_PREFIX_LENGTH) -> None:
        self.session = session
        self.prefix_length = prefix_length
        self.repository = APIKeyRepository(session)

    @staticmethod
    def generate_key() -> str:
        """Generate a new plaintext API key."""
        return f"{KEY_PREFIX}{token_service.random_hex(KEY_RANDOM_BYTES)}"

    @staticmethod
    def prefix_of(key: str, length: int = DEFAULT_PREFIX_LENGTH) -> str:
        """Return the lookup prefix of a key."""
        return key[:length]

    async def create_api_key(self, user_id: str, name: str) -> tuple[str, APIKeyModel]:
        """Create a key and store its hash.

        Args:
            user_id: ID of the user owning the key.
            name: Human-readable name for the key.

        Returns:
            tuple: (plaintext_key, APIKeyModel). The plaintext is never stored.
        """
        plaintext_key = self.generate_key()
        model = APIKeyModel(
            name=name,
            key_prefix=self.prefix_of(plaintext_key, self.prefix_length),
            key_hash=hash_password(plaintext_key),
            user_id=user_id,
        )
        await self.repository.create(model)

        logger.info("API key created", key_id=model.id, user_id=user_id, name=name)
        return plaintext_key, model

    async def list_for_user(self, user_id: str) -> Sequence[APIKeyModel]:
        """List every key of a user, revoked ones included."""
        return await self.repository.list_all_by_user(user_id)

    async def _get_owned(self, user_id: str, key_id: str) -> APIKeyModel:
        api_key = await self.repository.get_for_user(key_id, user_id)
        if api_key is None:
            raise NotFoundError("API key not found")
        return api_key

    async def revoke(self, user_id: str, key_id: str) -> APIKeyModel:
        """Revoke one of the user's keys.

        Raises:
            NotFoundError: If the key does not exist or belongs to someone else.
        """
        api_key = await self._get_owned(user_id, key_id)
        await self.repository.revoke(api_key)
        logger.info("API key revoked", key_id=key_id, user_id=user_id)
        return api_key

    async def delete(self, user_id: str, key_id: str) -> None:
        """Delete one of the user's keys.

        Raises:
            NotFoundError: If the key does not exist or belongs to someone else.
        """
        api_key = await self._get_owned(user_id, key_id)
        await self.repository.delete(api_key)
        logger.info("API key deleted", key_id=key_id, user_id=user_id)
