"""Domain exceptions for smsgate.

Every exception carries a stable machine-readable ``reason`` and the HTTP
status it maps to. The API layer renders them as
``{"error": reason, "message": message}``.
"""

from smsgate.domain.entities.invite import InviteFailureReason


class SMSGateError(Exception):
    """Base exception for all domain failures."""

    status_code: int = 500
    reason: str = "internal_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(SMSGateError):
    """Raised when an entity does not exist."""

    status_code = 404
    reason = "not_found"


class ConflictError(SMSGateError):
    """Raised on an invalid state transition (e.g. banning a banned user)."""

    status_code = 400
    reason = "conflict"


class UnauthorizedError(SMSGateError):
    """Raised when no valid credential was presented."""

    status_code = 401
    reason = "unauthorized"


class ForbiddenError(SMSGateError):
    """Raised when the principal lacks the required role."""

    status_code = 403
    reason = "forbidden"


class InvalidInputError(SMSGateError):
    """Raised when a request is well-formed JSON but semantically invalid."""

    status_code = 400
    reason = "invalid_input"


class InviteInvalidError(SMSGateError):
    """Raised when an invite code cannot be used.

    ``reason`` is one of the :class:`InviteFailureReason` values so callers can
    tell an unknown code from a revoked, expired or exhausted one.
    """

    status_code = 400

    MESSAGES = {
        InviteFailureReason.INVALID_CODE: "Invalid invite code",
        InviteFailureReason.REVOKED: "This invite code has been revoked",
        InviteFailureReason.EXPIRED: "This invite code has expired",
        InviteFailureReason.EXHAUSTED: "This invite code has reached its maximum uses",
    }

    def __init__(self, failure: InviteFailureReason) -> None:
        super().__init__(self.MESSAGES[failure])
        self.failure = failure
        self.reason = failure.value


class BotVerificationError(SMSGateError):
    """Raised when the bot-verification challenge was missing or rejected."""

    status_code = 400
    reason = "bot_verification_failed"


class UpstreamUnavailableError(SMSGateError):
    """Raised when the bot-verification service failed or timed out.

    Verification is best-effort gating, so this is a client error rather
    than a server fault.
    """

    status_code = 400
    reason = "upstream_unavailable"
