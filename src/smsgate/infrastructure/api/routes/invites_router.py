"""Admin invite management routes."""

from fastapi import APIRouter, Query, status

from smsgate.core.logging import get_logger
from smsgate.domain.services import InviteService
from smsgate.infrastructure.api.dependencies import AdminUser, SessionDep, SettingsDep
from smsgate.infrastructure.api.schemas import (
    InviteCreateRequest,
    InviteListResponse,
    InviteResponse,
    MessageResponse,
)

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=InviteResponse,
    responses={400: {"description": "Invalid limits"}},
)
async def create_invite(
    request: InviteCreateRequest,
    current_user: AdminUser,
    session: SessionDep,
    settings: SettingsDep,
) -> InviteResponse:
    """Issue a new invite code."""
    service = InviteService(session, settings)
    invite = await service.create(
        issuer_id=current_user.user_id,
        max_uses=request.max_uses,
        expires_in_days=request.expires_in_days,
        note=request.note,
    )
    await session.commit()
    logger.info("Invite issued by admin", admin_id=current_user.user_id, invite_id=invite.id)
    return InviteResponse.from_model(invite)


@router.get("", response_model=InviteListResponse)
async def list_invites(
    current_user: AdminUser,
    session: SessionDep,
    settings: SettingsDep,
    limit: int | None = Query(None, ge=1, description="Page size"),
    offset: int = Query(0, ge=0, description="Number of invites to skip"),
) -> InviteListResponse:
    """List invites newest first.

    ``limit`` defaults to ``invite_list_default_limit`` and is capped at
    ``invite_list_max_limit``.
    """
    if limit is None:
        limit = settings.invite_list_default_limit
    limit = min(limit, settings.invite_list_max_limit)

    invites, total = await InviteService(session, settings).list(limit=limit, offset=offset)
    return InviteListResponse(
        items=[InviteResponse.from_model(invite) for invite in invites],
        total=total,
    )


@router.get(
    "/{invite_id}",
    response_model=InviteResponse,
    responses={404: {"description": "Invite not found"}},
)
async def get_invite(
    invite_id: str,
    current_user: AdminUser,
    session: SessionDep,
    settings: SettingsDep,
) -> InviteResponse:
    """Get a single invite."""
    invite = await InviteService(session, settings).get_by_id(invite_id)
    return InviteResponse.from_model(invite)


@router.post(
    "/{invite_id}/revoke",
    response_model=MessageResponse,
    responses={404: {"description": "Invite not found"}},
)
async def revoke_invite(
    invite_id: str,
    current_user: AdminUser,
    session: SessionDep,
    settings: SettingsDep,
) -> MessageResponse:
    """Revoke an invite. Already revoked invites stay revoked."""
    await InviteService(session, settings).revoke(invite_id)
    await session.commit()
    logger.info("Invite revoked by admin", admin_id=current_user.user_id, invite_id=invite_id)
    return MessageResponse(message="Invite revoked successfully")


@router.delete(
    "/{invite_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Invite not found"}},
)
async def delete_invite(
    invite_id: str,
    current_user: AdminUser,
    session: SessionDep,
    settings: SettingsDep,
) -> MessageResponse:
    """Delete an invite."""
    await InviteService(session, settings).delete(invite_id)
    await session.commit()
    logger.info("Invite deleted by admin", admin_id=current_user.user_id, invite_id=invite_id)
    return MessageResponse(message="Invite deleted successfully")
