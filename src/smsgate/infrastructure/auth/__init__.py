"""Authentication infrastructure components.

This module provides secret hashing, JWT token services, API key management
and request authentication.
"""

from smsgate.infrastructure.auth.authenticator import (
    AuthenticationError,
    Authenticator,
    extract_credential,
)
from smsgate.infrastructure.auth.jwt_service import (
    InvalidTokenError,
    JWTError,
    JWTService,
    TokenExpiredError,
)
from smsgate.infrastructure.auth.password_hasher import (
    hash_password,
    needs_rehash,
    verify_password,
)
from smsgate.infrastructure.auth.token_types import (
    ApiKeyCredential,
    AuthenticatedUser,
    BearerCredential,
    NoCredential,
    TokenType,
)

__all__ = [
    "ApiKeyCredential",
    "AuthenticatedUser",
    "AuthenticationError",
    "Authenticator",
    "BearerCredential",
    "InvalidTokenError",
    "JWTError",
    "JWTService",
    "NoCredential",
    "TokenExpiredError",
    "TokenType",
    "extract_credential",
    "hash_password",
    "needs_rehash",
    "verify_password",
]
