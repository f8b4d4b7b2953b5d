"""Unit tests for the structlog setup."""

import json

import pytest

from smsgate.core.config import Settings
from smsgate.core.logging import bind_correlation_id, clear_context, configure_logging, get_logger

module_logger = get_logger("smsgate.early")


@pytest.fixture
def json_logging():
    configure_logging(Settings(_env_file=None, environment="production", log_format="json"))
    yield
    clear_context()


def test_get_logger_writes_named_entries(json_logging, capsys):
    get_logger("smsgate.tests").info("hello", invite_id="abc")

    entry = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert entry["message"] == "hello"
    assert entry["logger"] == "smsgate.tests"
    assert entry["invite_id"] == "abc"
    assert entry["level"] == "info"


def test_get_logger_defaults_to_root_name(json_logging, capsys):
    get_logger().warning("no name")

    entry = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert entry["logger"] == "smsgate"


def test_correlation_id_is_merged(json_logging, capsys):
    bind_correlation_id("cid_123")
    get_logger(__name__).info("inside request")

    entry = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert entry["correlation_id"] == "cid_123"


def test_module_level_logger_follows_later_configuration(json_logging, capsys):
    """Loggers created at import time pick up configure_logging called afterwards."""
    module_logger.info("configured late")

    entry = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert entry["message"] == "configured late"
    assert entry["logger"] == "smsgate.early"
