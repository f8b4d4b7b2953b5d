"""FastAPI dependencies for authentication and authorization.

Requests authenticate with a bearer token or an API key. Every rejection is
reported with the same 401 body; the reason only shows up in the logs.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from smsgate.core.config import Settings, get_settings
from smsgate.core.logging import get_logger
from smsgate.domain.exceptions import ForbiddenError, UnauthorizedError
from smsgate.infrastructure.auth import (
    AuthenticatedUser,
    AuthenticationError,
    Authenticator,
    JWTService,
    extract_credential,
)
from smsgate.infrastructure.persistence.database import get_db_manager, get_db_session
from smsgate.infrastructure.services import AccessLogEntry, AccessLogRecorder

logger = get_logger(__name__)

ADMIN_REQUIRED_MESSAGE = "Admin access required. You do not have sufficient permissions."

SessionDep = Annotated[AsyncSession, Depends(get_db_session)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_jwt_service(settings: SettingsDep) -> JWTService:
    """Build the token service from the injected settings."""
    return JWTService.from_settings(settings)


def get_access_log_recorder(request: Request) -> AccessLogRecorder:
    """Get the access log recorder from app state.

    Args:
        request: FastAPI request object.

    Returns:
        AccessLogRecorder instance.
    """
    if not hasattr(request.app.state, "access_log_recorder"):
        settings = get_settings()
        request.app.state.access_log_recorder = AccessLogRecorder(
            get_db_manager().session_factory,
            enabled=settings.access_log_enabled,
        )
    return request.app.state.access_log_recorder


async def get_current_user(
    request: Request,
    session: SessionDep,
    settings: SettingsDep,
    jwt_service: Annotated[JWTService, Depends(get_jwt_service)],
    recorder: Annotated[AccessLogRecorder, Depends(get_access_log_recorder)],
) -> AuthenticatedUser:
    """Authenticate the request.

    Returns:
        AuthenticatedUser: The authenticated principal.

    Raises:
        UnauthorizedError: If no valid credential was presented.
    """
    credential = extract_credential(request.headers, request.query_params, settings)
    authenticator = Authenticator(session, settings, jwt_service=jwt_service)

    try:
        principal = await authenticator.authenticate(credential)
    except AuthenticationError as e:
        logger.info(
            "Authentication failed",
            reason=e.reason,
            method=request.method,
            path=request.url.path,
        )
        raise UnauthorizedError("Unauthorized") from e

    if principal.api_key_id is not None:
        await session.commit()

    recorder.record(
        AccessLogEntry(
            user_id=principal.user_id,
            api_key_id=principal.api_key_id,
            method=request.method,
            path=request.url.path,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
    )
    return principal


CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]


async def require_admin(current_user: CurrentUser) -> AuthenticatedUser:
    """Ensure the current user is an administrator.

    Raises:
        ForbiddenError: If the user does not hold the ADMIN role.
    """
    if not current_user.is_admin:
        logger.info(
            "Admin access denied",
            user_id=current_user.user_id,
            role=current_user.role,
        )
        raise ForbiddenError(ADMIN_REQUIRED_MESSAGE)
    return current_user


AdminUser = Annotated[AuthenticatedUser, Depends(require_admin)]
