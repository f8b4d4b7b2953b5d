"""Unit tests for registration and password login."""

from unittest.mock import AsyncMock

import pytest

from smsgate.domain.entities.invite import InviteFailureReason
from smsgate.domain.exceptions import (
    BotVerificationError,
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    InviteInvalidError,
    UnauthorizedError,
)
from smsgate.domain.services.invite_service import InviteService
from smsgate.domain.services.registration_service import (
    RegistrationData,
    RegistrationService,
)
from smsgate.infrastructure.persistence.repositories import (
    InviteRepository,
    UserRepository,
)

@pytest.fixture
def turnstile():
    return AsyncMock()


@pytest.fixture
def open_service(db_session, test_settings, jwt_service, turnstile):
    return RegistrationService(db_session, test_settings, jwt_service=jwt_service, turnstile=turnstile)


@pytest.fixture
def invite_only_service(db_session, settings_factory, jwt_service, turnstile):
    return RegistrationService(
        db_session,
        settings_factory(registration_mode="invite_only"),
        jwt_service=jwt_service,
        turnstile=turnstile,
    )


def _data(email: str, invite_code: str | None = None) -> RegistrationData:
    return RegistrationData(
        name="New User",
        email=email,
        password="long-enough-password",
        turnstile_token="challenge",
        invite_code=invite_code,
    )


@pytest.mark.asyncio
async def test_open_registration(open_service, jwt_service, turnstile):
    result = await open_service.register(_data("New@Example.com"), remote_ip="198.51.100.2")

    assert result.user.email == "new@example.com"
    assert result.user.role == "REGULAR"
    assert result.expires_in == jwt_service.get_expires_in()
    payload = jwt_service.validate_access_token(result.access_token)
    assert payload["sub"] == result.user.id
    turnstile.verify.assert_awaited_once_with("challenge", remote_ip="198.51.100.2")


@pytest.mark.asyncio
async def test_duplicate_email_is_conflict(open_service, regular_user):
    with pytest.raises(ConflictError):
        await open_service.register(_data("USER@example.com"))


@pytest.mark.asyncio
async def test_failed_bot_check_creates_nothing(open_service, db_session, turnstile):
    turnstile.verify.side_effect = BotVerificationError("Bot verification failed")

    with pytest.raises(BotVerificationError):
        await open_service.register(_data("bot@example.com"))

    assert await UserRepository(db_session).email_exists("bot@example.com") is False


@pytest.mark.asyncio
async def test_invite_only_requires_code(invite_only_service, db_session):
    with pytest.raises(InvalidInputError, match="invite code is required"):
        await invite_only_service.register(_data("nocode@example.com", invite_code="  "))

    assert await UserRepository(db_session).email_exists("nocode@example.com") is False


@pytest.mark.asyncio
async def test_invite_only_consumes_code(
    invite_only_service, db_session, test_settings, admin_user
):
    invite = await InviteService(db_session, test_settings).create(issuer_id=admin_user.id)
    await db_session.commit()

    result = await invite_only_service.register(_data("invited@example.com", invite.code.lower()))

    consumed = await InviteRepository(db_session).get_by_id(invite.id)
    assert consumed.current_uses == 1
    assert consumed.used_by == result.user.id


@pytest.mark.asyncio
async def test_exhausted_code_rolls_back_user(
    invite_only_service, db_session, test_settings, admin_user
):
    invite = await InviteService(db_session, test_settings).create(issuer_id=admin_user.id)
    invite_id, code = invite.id, invite.code
    await db_session.commit()

    await invite_only_service.register(_data("first@example.com", code))

    with pytest.raises(InviteInvalidError) as exc_info:
        await invite_only_service.register(_data("second@example.com", code))

    assert exc_info.value.failure is InviteFailureReason.EXHAUSTED
    assert await UserRepository(db_session).email_exists("second@example.com") is False
    consumed = await InviteRepository(db_session).get_by_id(invite_id)
    assert consumed.current_uses == 1


@pytest.mark.asyncio
async def test_unknown_code_rolls_back_user(invite_only_service, db_session):
    with pytest.raises(InviteInvalidError) as exc_info:
        await invite_only_service.register(_data("guess@example.com", "DEADBEEF"))

    assert exc_info.value.reason == "invalid_code"
    assert await UserRepository(db_session).email_exists("guess@example.com") is False


@pytest.mark.asyncio
async def test_open_mode_ignores_invite_code(open_service, db_session, test_settings, admin_user):
    invite = await InviteService(db_session, test_settings).create(issuer_id=admin_user.id)
    await db_session.commit()

    await open_service.register(_data("open@example.com", invite.code))

    untouched = await InviteRepository(db_session).get_by_id(invite.id)
    assert untouched.current_uses == 0


@pytest.mark.asyncio
async def test_login(open_service, regular_user, user_password):
    assert regular_user.last_login_at is None

    result = await open_service.login(regular_user.email, user_password)

    assert result.user.id == regular_user.id
    assert result.user.last_login_at is not None


@pytest.mark.asyncio
async def test_login_wrong_password(open_service, regular_user):
    with pytest.raises(UnauthorizedError, match="Invalid credentials"):
        await open_service.login(regular_user.email, "wrong-password")


@pytest.mark.asyncio
async def test_login_unknown_email(open_service, user_password):
    with pytest.raises(UnauthorizedError, match="Invalid credentials"):
        await open_service.login("nobody@example.com", user_password)


@pytest.mark.asyncio
async def test_banned_user_cannot_login(open_service, make_user, user_password):
    await make_user("banned@example.com", is_banned=True)

    with pytest.raises(ForbiddenError, match="banned"):
        await open_service.login("banned@example.com", user_password)
