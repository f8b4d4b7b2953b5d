"""Integration tests for registration, login, identity and API key endpoints."""

from unittest.mock import MagicMock

import pytest

from smsgate.core.config import get_settings
from smsgate.domain.services.invite_service import InviteService
from smsgate.infrastructure.api.dependencies import get_access_log_recorder
from smsgate.infrastructure.services.access_log_service import AccessLogEntry

AUTH_URL = "/api/v1/auth"


def _registration(email: str = "new@example.com", **extra) -> dict:
    return {"name": "New User", "email": email, "password": "long-enough-password", **extra}


@pytest.fixture
def invite_only(app, settings_factory):
    settings = settings_factory(registration_mode="invite_only")
    app.dependency_overrides[get_settings] = lambda: settings
    return settings


async def _create_api_key(client, headers, name="ci") -> dict:
    response = await client.post(f"{AUTH_URL}/api-keys", json={"name": name}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_registration_mode_open(client):
    response = await client.get(f"{AUTH_URL}/registration-mode")

    assert response.status_code == 200
    assert response.json() == {"mode": "open", "invite_only": False}


@pytest.mark.asyncio
async def test_registration_mode_invite_only(client, invite_only):
    response = await client.get(f"{AUTH_URL}/registration-mode")

    assert response.json() == {"mode": "invite_only", "invite_only": True}


@pytest.mark.asyncio
async def test_open_registration(client):
    response = await client.post(f"{AUTH_URL}/register", json=_registration())

    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["expires_in"] > 0
    assert body["user"]["email"] == "new@example.com"
    assert body["user"]["role"] == "REGULAR"

    me = await client.get(
        f"{AUTH_URL}/who-am-i", headers={"Authorization": f"Bearer {body['access_token']}"}
    )
    assert me.status_code == 200
    assert me.json()["id"] == body["user"]["id"]


@pytest.mark.asyncio
async def test_register_duplicate_email(client, regular_user):
    response = await client.post(f"{AUTH_URL}/register", json=_registration("user@example.com"))

    assert response.status_code == 400
    assert response.json()["error"] == "conflict"


@pytest.mark.asyncio
async def test_register_rejects_short_password(client):
    response = await client.post(
        f"{AUTH_URL}/register", json=_registration(password="short")
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "invalid_input"
    assert body["details"][0]["field"] == "password"


@pytest.mark.asyncio
async def test_invite_only_registration_requires_code(client, invite_only):
    response = await client.post(f"{AUTH_URL}/register", json=_registration())

    assert response.status_code == 400
    assert response.json() == {
        "error": "invalid_input",
        "message": "An invite code is required to register",
    }


@pytest.mark.asyncio
async def test_invite_only_registration_consumes_code(
    client, db_session, invite_only, admin_user
):
    invite = await InviteService(db_session, invite_only).create(issuer_id=admin_user.id)
    await db_session.commit()

    first = await client.post(
        f"{AUTH_URL}/register", json=_registration("first@example.com", invite_code=invite.code)
    )
    assert first.status_code == 201

    second = await client.post(
        f"{AUTH_URL}/register", json=_registration("second@example.com", invite_code=invite.code)
    )
    assert second.status_code == 400
    assert second.json() == {
        "error": "exhausted",
        "message": "This invite code has reached its maximum uses",
    }


@pytest.mark.asyncio
async def test_invite_only_registration_unknown_code(client, invite_only):
    response = await client.post(
        f"{AUTH_URL}/register", json=_registration(invite_code="NOT-A-REAL-CODE")
    )

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_code"


@pytest.mark.asyncio
async def test_validate_invite(client, db_session, test_settings, admin_user):
    invite = await InviteService(db_session, test_settings).create(issuer_id=admin_user.id)
    await db_session.commit()

    valid = await client.post(f"{AUTH_URL}/invites/validate", json={"code": invite.code})
    unknown = await client.post(f"{AUTH_URL}/invites/validate", json={"code": "NOPE"})

    assert valid.json() == {"valid": True}
    assert unknown.json() == {"valid": False}


@pytest.mark.asyncio
async def test_login(client, regular_user, user_password):
    response = await client.post(
        f"{AUTH_URL}/login", json={"email": "user@example.com", "password": user_password}
    )

    assert response.status_code == 200
    assert response.json()["user"]["last_login_at"] is not None


@pytest.mark.asyncio
async def test_login_wrong_password(client, regular_user):
    response = await client.post(
        f"{AUTH_URL}/login", json={"email": "user@example.com", "password": "nope-nope"}
    )

    assert response.status_code == 401
    assert response.json() == {"error": "unauthorized", "message": "Invalid credentials"}


@pytest.mark.asyncio
async def test_login_banned_user(client, make_user, user_password):
    await make_user("banned@example.com", is_banned=True)

    response = await client.post(
        f"{AUTH_URL}/login", json={"email": "banned@example.com", "password": user_password}
    )

    assert response.status_code == 403
    assert response.json()["message"] == "Your account has been banned"


@pytest.mark.asyncio
async def test_who_am_i_requires_credentials(client):
    response = await client.get(f"{AUTH_URL}/who-am-i")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_unsupported_scheme_is_unauthorized(client):
    response = await client.get(
        f"{AUTH_URL}/who-am-i", headers={"Authorization": "Basic dXNlcjpwYXNz"}
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_api_key_lifecycle(client, regular_headers):
    created = await _create_api_key(client, regular_headers)
    key = created["key"]
    assert key.startswith("sg_")
    assert created["key_prefix"] == key[:17]

    listed = await client.get(f"{AUTH_URL}/api-keys", headers=regular_headers)
    assert listed.status_code == 200
    assert [k["id"] for k in listed.json()] == [created["id"]]
    assert "key" not in listed.json()[0]

    by_header = await client.get(f"{AUTH_URL}/who-am-i", headers={"x-api-key": key})
    assert by_header.status_code == 200
    assert by_header.json()["email"] == "user@example.com"

    by_query = await client.get(f"{AUTH_URL}/who-am-i", params={"apiKey": key})
    assert by_query.status_code == 200

    revoked = await client.post(
        f"{AUTH_URL}/api-keys/{created['id']}/revoke", headers=regular_headers
    )
    assert revoked.status_code == 200
    assert revoked.json()["revoked_at"] is not None
    assert revoked.json()["last_used_at"] is not None

    rejected = await client.get(f"{AUTH_URL}/who-am-i", headers={"x-api-key": key})
    assert rejected.status_code == 401


@pytest.mark.asyncio
async def test_api_key_used_alongside_other_scheme(client, regular_headers):
    key = (await _create_api_key(client, regular_headers))["key"]

    response = await client.get(
        f"{AUTH_URL}/who-am-i",
        headers={"Authorization": "Basic dXNlcjpwYXNz", "x-api-key": key},
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_api_key_grants_admin_access(client, admin_headers):
    key = (await _create_api_key(client, admin_headers))["key"]

    response = await client.get("/api/v1/admin/stats", headers={"x-api-key": key})

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_cannot_touch_another_users_key(client, admin_headers, regular_headers):
    admin_key = await _create_api_key(client, admin_headers, name="admin")

    revoke = await client.post(
        f"{AUTH_URL}/api-keys/{admin_key['id']}/revoke", headers=regular_headers
    )
    delete = await client.delete(f"{AUTH_URL}/api-keys/{admin_key['id']}", headers=regular_headers)

    assert revoke.status_code == 404
    assert revoke.json() == {"error": "not_found", "message": "API key not found"}
    assert delete.status_code == 404


@pytest.mark.asyncio
async def test_delete_api_key(client, regular_headers):
    created = await _create_api_key(client, regular_headers)

    response = await client.delete(f"{AUTH_URL}/api-keys/{created['id']}", headers=regular_headers)

    assert response.status_code == 200
    assert response.json() == {"message": "API key deleted successfully"}
    listed = await client.get(f"{AUTH_URL}/api-keys", headers=regular_headers)
    assert listed.json() == []


@pytest.mark.asyncio
async def test_authenticated_requests_are_recorded(app, client, regular_user, regular_headers):
    recorder = MagicMock()
    app.dependency_overrides[get_access_log_recorder] = lambda: recorder

    response = await client.get(
        f"{AUTH_URL}/who-am-i", headers={**regular_headers, "User-Agent": "pytest-agent"}
    )

    assert response.status_code == 200
    recorder.record.assert_called_once()
    entry = recorder.record.call_args.args[0]
    assert isinstance(entry, AccessLogEntry)
    assert entry.user_id == regular_user.id
    assert entry.method == "GET"
    assert entry.path == "/api/v1/auth/who-am-i"
    assert entry.api_key_id is None
    assert entry.user_agent == "pytest-agent"


@pytest.mark.asyncio
async def test_failed_authentication_is_not_recorded(app, client):
    recorder = MagicMock()
    app.dependency_overrides[get_access_log_recorder] = lambda: recorder

    response = await client.get(f"{AUTH_URL}/who-am-i", headers={"x-api-key": "sg_bogus"})

    assert response.status_code == 401
    recorder.record.assert_not_called()
