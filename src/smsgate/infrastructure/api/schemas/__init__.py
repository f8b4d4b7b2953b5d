"""API Schemas for request/response validation."""

from smsgate.infrastructure.api.schemas.admin_schemas import (
    MessageResponse,
    RoleUpdateRequest,
    StatsResponse,
)
from smsgate.infrastructure.api.schemas.api_key_schemas import (
    APIKeyCreateRequest,
    APIKeyCreateResponse,
    APIKeyResponse,
)
from smsgate.infrastructure.api.schemas.auth_schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    RegistrationModeResponse,
)
from smsgate.infrastructure.api.schemas.invite_schemas import (
    InviteCreateRequest,
    InviteListResponse,
    InviteResponse,
    InviteStatus,
    InviteValidateRequest,
    InviteValidateResponse,
)
from smsgate.infrastructure.api.schemas.user_schemas import UserResponse, UserSummary

__all__ = [
    "APIKeyCreateRequest",
    "APIKeyCreateResponse",
    "APIKeyResponse",
    "AuthResponse",
    "InviteCreateRequest",
    "InviteListResponse",
    "InviteResponse",
    "InviteStatus",
    "InviteValidateRequest",
    "InviteValidateResponse",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "RegistrationModeResponse",
    "RoleUpdateRequest",
    "StatsResponse",
    "UserResponse",
    "UserSummary",
]
