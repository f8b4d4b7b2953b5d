"""Authentication routes: registration, login, identity and API keys."""

from fastapi import APIRouter, Request, status

from smsgate.core.logging import get_logger
from smsgate.domain.exceptions import UnauthorizedError
from smsgate.domain.services import (
    AuthResult,
    InviteService,
    RegistrationData,
    RegistrationService,
)
from smsgate.infrastructure.api.dependencies import (
    CurrentUser,
    SessionDep,
    SettingsDep,
)
from smsgate.infrastructure.api.schemas import (
    APIKeyCreateRequest,
    APIKeyCreateResponse,
    APIKeyResponse,
    AuthResponse,
    InviteValidateRequest,
    InviteValidateResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegistrationModeResponse,
    UserResponse,
)
from smsgate.infrastructure.auth.api_key_service import APIKeyService
from smsgate.infrastructure.persistence.repositories import UserRepository

logger = get_logger(__name__)

router = APIRouter()


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        access_token=result.access_token,
        expires_in=result.expires_in,
        user=UserResponse.model_validate(result.user),
    )


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthResponse,
    responses={400: {"description": "Invalid input, invite code or bot verification"}},
)
async def register(
    request: Request,
    body: RegisterRequest,
    session: SessionDep,
    settings: SettingsDep,
) -> AuthResponse:
    """Register a new account.

    In invite-only mode ``invite_code`` is required and consumed as part of
    the same transaction that creates the user.
    """
    service = RegistrationService(session, settings)
    result = await service.register(
        RegistrationData(
            name=body.name,
            email=body.email,
            password=body.password,
            phone=body.phone,
            turnstile_token=body.turnstile_token,
            invite_code=body.invite_code,
        ),
        remote_ip=_client_ip(request),
    )
    return _auth_response(result)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        401: {"description": "Invalid credentials"},
        403: {"description": "User is banned"},
    },
)
async def login(
    request: Request,
    body: LoginRequest,
    session: SessionDep,
    settings: SettingsDep,
) -> AuthResponse:
    """Log in with email and password."""
    result = await RegistrationService(session, settings).login(
        email=body.email,
        password=body.password,
        turnstile_token=body.turnstile_token,
        remote_ip=_client_ip(request),
    )
    return _auth_response(result)


@router.get("/registration-mode", response_model=RegistrationModeResponse)
async def registration_mode(settings: SettingsDep) -> RegistrationModeResponse:
    """Tell clients whether registration needs an invite code."""
    return RegistrationModeResponse(
        mode=settings.registration_mode,
        invite_only=settings.is_invite_only,
    )


@router.post("/invites/validate", response_model=InviteValidateResponse)
async def validate_invite(
    body: InviteValidateRequest,
    session: SessionDep,
    settings: SettingsDep,
) -> InviteValidateResponse:
    """Check an invite code without consuming it.

    The answer is advisory; registration re-checks the code atomically.
    """
    valid = await InviteService(session, settings).validate_only(body.code)
    return InviteValidateResponse(valid=valid)


@router.get("/who-am-i", response_model=UserResponse)
async def who_am_i(current_user: CurrentUser, session: SessionDep) -> UserResponse:
    """Return the authenticated user."""
    user = await UserRepository(session).get_by_id(current_user.user_id)
    if user is None:
        raise UnauthorizedError("Unauthorized")
    return UserResponse.model_validate(user)


@router.post(
    "/api-keys",
    status_code=status.HTTP_201_CREATED,
    response_model=APIKeyCreateResponse,
)
async def create_api_key(
    body: APIKeyCreateRequest,
    current_user: CurrentUser,
    session: SessionDep,
    settings: SettingsDep,
) -> APIKeyCreateResponse:
    """Create an API key. The plaintext key is only returned here."""
    service = APIKeyService(session, prefix_length=settings.api_key_prefix_length)
    plaintext_key, api_key = await service.create_api_key(current_user.user_id, body.name)
    await session.commit()
    return APIKeyCreateResponse(
        id=api_key.id,
        name=api_key.name,
        key_prefix=api_key.key_prefix,
        created_at=api_key.created_at,
        last_used_at=api_key.last_used_at,
        revoked_at=api_key.revoked_at,
        key=plaintext_key,
    )


@router.get("/api-keys", response_model=list[APIKeyResponse])
async def list_api_keys(
    current_user: CurrentUser,
    session: SessionDep,
    settings: SettingsDep,
) -> list[APIKeyResponse]:
    """List the caller's API keys, revoked ones included."""
    service = APIKeyService(session, prefix_length=settings.api_key_prefix_length)
    keys = await service.list_for_user(current_user.user_id)
    return [APIKeyResponse.model_validate(key) for key in keys]


@router.post(
    "/api-keys/{key_id}/revoke",
    response_model=APIKeyResponse,
    responses={404: {"description": "API key not found"}},
)
async def revoke_api_key(
    key_id: str,
    current_user: CurrentUser,
    session: SessionDep,
    settings: SettingsDep,
) -> APIKeyResponse:
    """Revoke one of the caller's API keys."""
    service = APIKeyService(session, prefix_length=settings.api_key_prefix_length)
    api_key = await service.revoke(current_user.user_id, key_id)
    await session.commit()
    return APIKeyResponse.model_validate(api_key)


@router.delete(
    "/api-keys/{key_id}",
    response_model=MessageResponse,
    responses={404: {"description": "API key not found"}},
)
async def delete_api_key(
    key_id: str,
    current_user: CurrentUser,
    session: SessionDep,
    settings: SettingsDep,
) -> MessageResponse:
    """Delete one of the caller's API keys."""
    service = APIKeyService(session, prefix_length=settings.api_key_prefix_length)
    await service.delete(current_user.user_id, key_id)
    await session.commit()
    return MessageResponse(message="API key deleted successfully")
