"""Bearer token issuing and verification.

Login and registration hand out HS256 access tokens. Only the subject is
trusted when a token comes back; the role claim is informational and the
authenticator re-reads the user.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from smsgate.core.config import Settings

TOKEN_ALGORITHM = "HS256"
TOKEN_ISSUER = "smsgate"
ACCESS_TOKEN_TYPE = "access"
REQUIRED_CLAIMS = ["exp", "sub"]


class JWTError(Exception):
    """A presented bearer token could not be accepted."""


class TokenExpiredError(JWTError):
    """The token was well-formed but is past its ``exp``."""


class InvalidTokenError(JWTError):
    """Bad signature, wrong issuer, missing claims or wrong token type."""


class JWTService:
    """Signs and verifies access tokens with a shared secret."""

    ALGORITHM = TOKEN_ALGORITHM
    ISSUER = TOKEN_ISSUER

    def __init__(self, secret_key: str, access_token_expire_minutes: int = 60 * 24 * 7) -> None:
        self.secret_key = secret_key
        self.access_token_expire_minutes = access_token_expire_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "JWTService":
        return cls(
            secret_key=settings.secret_key,
            access_token_expire_minutes=settings.access_token_expire_minutes,
        )

    @property
    def lifetime(self) -> timedelta:
        """Configured lifetime of a freshly issued access token."""
        return timedelta(minutes=self.access_token_expire_minutes)

    def create_access_token(
        self,
        user_id: str,
        email: str,
        role: str,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Issue an access token for a user.

        Args:
            user_id: Subject of the token.
            email: Copied into the token for client display.
            role: Role at issue time. Not used for authorization.
            expires_delta: Overrides the configured lifetime.

        Returns:
            The compact JWS string.
        """
        issued_at = datetime.now(timezone.utc)
        claims = {
            "iss": self.ISSUER,
            "sub": user_id,
            "type": ACCESS_TOKEN_TYPE,
            "email": email,
            "role": role,
            "iat": issued_at,
            "exp": issued_at + (expires_delta or self.lifetime),
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.ALGORITHM)

    def decode_token(self, token: str) -> dict[str, Any]:
        """Verify signature, issuer and expiry and return the claims.

        Raises:
            TokenExpiredError: If ``exp`` is in the past.
            InvalidTokenError: For any other verification failure.
        """
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.ALGORITHM],
                issuer=self.ISSUER,
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.PyJWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e
        return claims

    def validate_access_token(self, token: str) -> dict[str, Any]:
        """Like :meth:`decode_token`, but also insists on ``type == "access"``."""
        claims = self.decode_token(token)
        if claims.get("type") != ACCESS_TOKEN_TYPE:
            raise InvalidTokenError("Not an access token")
        return claims

    def get_expires_in(self, expires_delta: timedelta | None = None) -> int:
        """Seconds until a token issued now would expire."""
        return int((expires_delta or self.lifetime).total_seconds())
