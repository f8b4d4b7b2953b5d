"""Admin user management and statistics routes.

All endpoints require an authenticated principal with the ADMIN role.
"""

from fastapi import APIRouter, Response, status

from smsgate.core.logging import get_logger
from smsgate.domain.services import AdminService
from smsgate.infrastructure.api.dependencies import AdminUser, SessionDep
from smsgate.infrastructure.api.schemas import (
    RoleUpdateRequest,
    StatsResponse,
    UserResponse,
)

logger = get_logger(__name__)

router = APIRouter()


@router.get("/users", response_model=list[UserResponse])
async def list_users(current_user: AdminUser, session: SessionDep) -> list[UserResponse]:
    """List all users, newest first."""
    users = await AdminService(session).list_users()
    return [UserResponse.model_validate(user) for user in users]


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    responses={404: {"description": "User not found"}},
)
async def get_user(user_id: str, current_user: AdminUser, session: SessionDep) -> UserResponse:
    """Get a single user."""
    user = await AdminService(session).get_user(user_id)
    return UserResponse.model_validate(user)


@router.patch(
    "/users/{user_id}/role",
    response_model=UserResponse,
    responses={
        400: {"description": "Invalid role or role unchanged"},
        404: {"description": "User not found"},
    },
)
async def update_user_role(
    user_id: str,
    request: RoleUpdateRequest,
    current_user: AdminUser,
    session: SessionDep,
) -> UserResponse:
    """Change a user's role."""
    user = await AdminService(session).update_role(user_id, request.role)
    await session.commit()
    logger.info("Role changed by admin", admin_id=current_user.user_id, user_id=user_id)
    return UserResponse.model_validate(user)


@router.patch(
    "/users/{user_id}/ban",
    response_model=UserResponse,
    responses={
        400: {"description": "User is already banned"},
        404: {"description": "User not found"},
    },
)
async def ban_user(user_id: str, current_user: AdminUser, session: SessionDep) -> UserResponse:
    """Ban a user."""
    user = await AdminService(session).ban(user_id)
    await session.commit()
    logger.info("User banned by admin", admin_id=current_user.user_id, user_id=user_id)
    return UserResponse.model_validate(user)


@router.patch(
    "/users/{user_id}/unban",
    response_model=UserResponse,
    responses={
        400: {"description": "User is not banned"},
        404: {"description": "User not found"},
    },
)
async def unban_user(user_id: str, current_user: AdminUser, session: SessionDep) -> UserResponse:
    """Lift a ban."""
    user = await AdminService(session).unban(user_id)
    await session.commit()
    logger.info("User unbanned by admin", admin_id=current_user.user_id, user_id=user_id)
    return UserResponse.model_validate(user)


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "User not found"}},
)
async def delete_user(user_id: str, current_user: AdminUser, session: SessionDep) -> Response:
    """Delete a user and everything they own."""
    await AdminService(session).delete_user(user_id)
    await session.commit()
    logger.info("User deleted by admin", admin_id=current_user.user_id, user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/stats", response_model=StatsResponse)
async def get_stats(current_user: AdminUser, session: SessionDep) -> StatsResponse:
    """Platform-wide counters."""
    stats = await AdminService(session).get_stats()
    return StatsResponse.model_validate(stats)
