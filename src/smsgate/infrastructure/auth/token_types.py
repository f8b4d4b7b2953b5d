"""Credential and principal types for request authentication.

A request's credential is resolved exactly once into one of
:class:`BearerCredential`, :class:`ApiKeyCredential` or :class:`NoCredential`.
Successful authentication produces an :class:`AuthenticatedUser`.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from smsgate.domain.entities.user import UserRole


class TokenType(str, Enum):
    """How the principal authenticated."""

    JWT = "jwt"
    API_KEY = "api_key"


@dataclass(frozen=True)
class BearerCredential:
    """A token taken from ``Authorization: Bearer <token>``."""

    token: str


@dataclass(frozen=True)
class ApiKeyCredential:
    """An API key taken from the API-key header or query parameter."""

    key: str


@dataclass(frozen=True)
class NoCredential:
    """No usable credential; ``reason`` is only ever logged."""

    reason: str


Credential = Union[BearerCredential, ApiKeyCredential, NoCredential]


@dataclass
class AuthenticatedUser:
    """Represents an authenticated principal in the request context."""

    user_id: str
    email: str
    name: str
    role: str
    token_type: TokenType
    api_key_id: str | None = None

    @property
    def id(self) -> str:
        """Alias for user_id."""
        return self.user_id

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
