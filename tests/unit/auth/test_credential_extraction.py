"""Unit tests for resolving a request's credential."""

from smsgate.infrastructure.auth.authenticator import extract_credential
from smsgate.infrastructure.auth.token_types import (
    ApiKeyCredential,
    BearerCredential,
    NoCredential,
)


def test_bearer_header(test_settings):
    credential = extract_credential({"Authorization": "Bearer abc.def.ghi"}, {}, test_settings)
    assert credential == BearerCredential(token="abc.def.ghi")


def test_bearer_scheme_is_case_insensitive(test_settings):
    credential = extract_credential({"authorization": "bearer tok"}, {}, test_settings)
    assert credential == BearerCredential(token="tok")


def test_api_key_header(test_settings):
    credential = extract_credential({"X-API-Key": "sg_123"}, {}, test_settings)
    assert credential == ApiKeyCredential(key="sg_123")


def test_api_key_query_parameter(test_settings):
    credential = extract_credential({}, {"apiKey": "sg_456"}, test_settings)
    assert credential == ApiKeyCredential(key="sg_456")


def test_header_wins_over_query_parameter(test_settings):
    credential = extract_credential({"x-api-key": "sg_header"}, {"apiKey": "sg_query"}, test_settings)
    assert credential == ApiKeyCredential(key="sg_header")


def test_bearer_wins_over_api_key(test_settings):
    credential = extract_credential(
        {"Authorization": "Bearer tok", "x-api-key": "sg_key"}, {}, test_settings
    )
    assert isinstance(credential, BearerCredential)


def test_non_bearer_authorization_falls_back_to_api_key(test_settings):
    credential = extract_credential(
        {"Authorization": "Basic dXNlcjpwYXNz", "x-api-key": "sg_key"}, {}, test_settings
    )
    assert credential == ApiKeyCredential(key="sg_key")


def test_non_bearer_authorization_alone(test_settings):
    credential = extract_credential({"Authorization": "Basic dXNlcjpwYXNz"}, {}, test_settings)
    assert credential == NoCredential(reason="unsupported_authorization_scheme")


def test_empty_bearer_token_is_not_a_credential(test_settings):
    credential = extract_credential({"Authorization": "Bearer "}, {}, test_settings)
    assert isinstance(credential, NoCredential)


def test_nothing_presented(test_settings):
    assert extract_credential({}, {}, test_settings) == NoCredential(reason="missing_credential")
