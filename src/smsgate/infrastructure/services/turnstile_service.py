"""Cloudflare Turnstile bot verification.

Registration and login call :meth:`TurnstileService.verify` before touching
the database. When no secret key is configured, verification is skipped.
"""

import httpx

from smsgate.core.config import Settings
from smsgate.core.logging import get_logger
from smsgate.domain.exceptions import BotVerificationError, UpstreamUnavailableError

logger = get_logger(__name__)


class TurnstileService:
    """Verifies Turnstile challenge tokens against the siteverify endpoint."""

    def __init__(self, settings: Settings) -> None:
        self.secret_key = settings.turnstile_secret_key
        self.verify_url = settings.turnstile_verify_url
        self.timeout = settings.turnstile_timeout_seconds

    @property
    def enabled(self) -> bool:
        return bool(self.secret_key)

    async def verify(self, token: str | None, remote_ip: str | None = None) -> None:
        """Verify a challenge token.

        Args:
            token: Token produced by the client-side widget.
            remote_ip: Optional client IP forwarded to Cloudflare.

        Raises:
            BotVerificationError: If the token is missing or rejected.
            UpstreamUnavailableError: If Cloudflare could not be reached in time.
        """
        if not self.enabled:
            logger.debug("Turnstile secret not configured, skipping verification")
            return

        if not token:
            raise BotVerificationError("Bot verification is required")

        data = {"secret": self.secret_key, "response": token}
        if remote_ip:
            data["remoteip"] = remote_ip

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(self.verify_url, data=data)
                response.raise_for_status()
                result = response.json()
            except httpx.HTTPError as e:
                logger.error("Turnstile verification request failed", error=str(e))
                raise UpstreamUnavailableError(
                    "Bot verification service is unavailable, please try again"
                ) from e
            except ValueError as e:
                logger.error("Turnstile returned a malformed response", error=str(e))
                raise UpstreamUnavailableError(
                    "Bot verification service is unavailable, please try again"
                ) from e

        if result.get("success") is not True:
            logger.warning(
                "Turnstile verification failed",
                error_codes=result.get("error-codes", []),
            )
            raise BotVerificationError("Bot verification failed")
