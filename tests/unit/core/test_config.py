"""Unit tests for application settings."""

import pytest
from pydantic import ValidationError

from smsgate.core.config import Settings


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.registration_mode == "open"
    assert settings.is_invite_only is False
    assert settings.api_key_header == "x-api-key"
    assert settings.api_key_query_param == "apiKey"
    assert settings.api_key_prefix_length == 17
    assert settings.invite_default_max_uses == 1
    assert settings.invite_default_expires_in_days == 7
    assert settings.turnstile_secret_key is None


def test_invite_only_mode():
    assert Settings(_env_file=None, registration_mode="invite_only").is_invite_only is True


def test_unknown_registration_mode_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, registration_mode="closed")


def test_sqlite_rejects_multiple_workers():
    with pytest.raises(ValidationError, match="SQLite does not support multiple worker"):
        Settings(_env_file=None, workers=4)


def test_postgres_allows_multiple_workers():
    settings = Settings(
        _env_file=None,
        workers=4,
        database_url="postgresql+asyncpg://sg:sg@localhost/smsgate",
    )

    assert settings.workers == 4


def test_cors_origins_from_comma_separated_string():
    settings = Settings(_env_file=None, cors_origins="https://a.example, https://b.example")

    assert settings.cors_origins == ["https://a.example", "https://b.example"]


def test_environment_reads_prefixed_variables(monkeypatch):
    monkeypatch.setenv("SMSGATE_REGISTRATION_MODE", "invite_only")
    monkeypatch.setenv("SMSGATE_ENVIRONMENT", "production")

    settings = Settings(_env_file=None)

    assert settings.is_invite_only is True
    assert settings.is_production is True
