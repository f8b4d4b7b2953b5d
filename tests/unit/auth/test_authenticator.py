"""Unit tests for dual-mode request authentication."""

from datetime import timedelta

import pytest

from smsgate.infrastructure.auth.api_key_service import APIKeyService
from smsgate.infrastructure.auth.authenticator import AuthenticationError, Authenticator
from smsgate.infrastructure.auth.jwt_service import JWTService
from smsgate.infrastructure.auth.token_types import (
    ApiKeyCredential,
    BearerCredential,
    NoCredential,
    TokenType,
)


@pytest.fixture
def authenticator(db_session, test_settings, jwt_service):
    return Authenticator(db_session, test_settings, jwt_service=jwt_service)


@pytest.mark.asyncio
async def test_valid_bearer_token(authenticator, admin_user, admin_token):
    principal = await authenticator.authenticate(BearerCredential(token=admin_token))

    assert principal.user_id == admin_user.id
    assert principal.email == admin_user.email
    assert principal.is_admin is True
    assert principal.token_type == TokenType.JWT
    assert principal.api_key_id is None


@pytest.mark.asyncio
async def test_role_comes_from_the_database(authenticator, regular_user, jwt_service):
    """A forged role claim does not grant admin."""
    token = jwt_service.create_access_token(
        user_id=regular_user.id, email=regular_user.email, role="ADMIN"
    )

    principal = await authenticator.authenticate(BearerCredential(token=token))

    assert principal.is_admin is False


@pytest.mark.asyncio
async def test_expired_bearer_token(authenticator, regular_user, jwt_service):
    token = jwt_service.create_access_token(
        user_id=regular_user.id,
        email=regular_user.email,
        role=regular_user.role,
        expires_delta=timedelta(seconds=-10),
    )

    with pytest.raises(AuthenticationError) as exc_info:
        await authenticator.authenticate(BearerCredential(token=token))

    assert exc_info.value.reason == "token_expired"


@pytest.mark.asyncio
async def test_bearer_token_signed_with_another_secret(authenticator, regular_user):
    forged = JWTService("another-secret-key-that-is-also-long-enough").create_access_token(
        user_id=regular_user.id, email=regular_user.email, role=regular_user.role
    )

    with pytest.raises(AuthenticationError) as exc_info:
        await authenticator.authenticate(BearerCredential(token=forged))

    assert exc_info.value.reason == "invalid_token"


@pytest.mark.asyncio
async def test_bearer_token_for_deleted_user(authenticator, jwt_service):
    token = jwt_service.create_access_token(user_id="missing", email="x@example.com", role="ADMIN")

    with pytest.raises(AuthenticationError) as exc_info:
        await authenticator.authenticate(BearerCredential(token=token))

    assert exc_info.value.reason == "unknown_subject"


@pytest.mark.asyncio
async def test_valid_api_key(authenticator, db_session, regular_user):
    plaintext, api_key = await APIKeyService(db_session).create_api_key(regular_user.id, "ci")
    await db_session.commit()

    principal = await authenticator.authenticate(ApiKeyCredential(key=plaintext))

    assert principal.user_id == regular_user.id
    assert principal.token_type == TokenType.API_KEY
    assert principal.api_key_id == api_key.id


@pytest.mark.asyncio
async def test_api_key_with_matching_prefix_but_wrong_secret(authenticator, db_session, regular_user):
    plaintext, _ = await APIKeyService(db_session).create_api_key(regular_user.id, "ci")
    await db_session.commit()

    tampered = plaintext[:-4] + ("0000" if not plaintext.endswith("0000") else "1111")

    with pytest.raises(AuthenticationError) as exc_info:
        await authenticator.authenticate(ApiKeyCredential(key=tampered))

    assert exc_info.value.reason == "invalid_api_key"


@pytest.mark.asyncio
async def test_revoked_api_key_is_rejected(authenticator, db_session, regular_user):
    service = APIKeyService(db_session)
    plaintext, api_key = await service.create_api_key(regular_user.id, "ci")
    await service.revoke(regular_user.id, api_key.id)
    await db_session.commit()

    with pytest.raises(AuthenticationError):
        await authenticator.authenticate(ApiKeyCredential(key=plaintext))


@pytest.mark.asyncio
async def test_unknown_api_key(authenticator):
    with pytest.raises(AuthenticationError):
        await authenticator.authenticate(ApiKeyCredential(key="sg_" + "f" * 48))


@pytest.mark.asyncio
async def test_no_credential(authenticator):
    with pytest.raises(AuthenticationError) as exc_info:
        await authenticator.authenticate(NoCredential(reason="missing_credential"))

    assert exc_info.value.reason == "missing_credential"
