"""Unit tests for invite usability rules."""

from datetime import datetime, timedelta, timezone

from smsgate.domain.entities.invite import (
    InviteFailureReason,
    InviteState,
    as_utc,
    normalize_code,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _state(**overrides) -> InviteState:
    values = {
        "is_revoked": False,
        "expires_at": NOW + timedelta(days=1),
        "current_uses": 0,
        "max_uses": 1,
    }
    values.update(overrides)
    return InviteState(**values)


def test_usable_invite_has_no_failure():
    assert _state().failure_reason(NOW) is None


def test_revoked_is_reported_before_expired_and_exhausted():
    state = _state(is_revoked=True, expires_at=NOW - timedelta(days=1), current_uses=1)
    assert state.failure_reason(NOW) == InviteFailureReason.REVOKED


def test_expired_is_reported_before_exhausted():
    state = _state(expires_at=NOW - timedelta(seconds=1), current_uses=1)
    assert state.failure_reason(NOW) == InviteFailureReason.EXPIRED


def test_expiry_instant_is_still_usable():
    assert _state(expires_at=NOW).failure_reason(NOW) is None


def test_exhausted_when_uses_reach_max():
    assert _state(current_uses=3, max_uses=3).failure_reason(NOW) == InviteFailureReason.EXHAUSTED


def test_normalize_code_is_case_insensitive_and_trimmed():
    assert normalize_code("  ab12cd  ") == "AB12CD"


def test_as_utc_treats_naive_values_as_utc():
    naive = datetime(2026, 1, 1, 8, 30)
    assert as_utc(naive) == datetime(2026, 1, 1, 8, 30, tzinfo=timezone.utc)


def test_as_utc_converts_other_offsets():
    plus_two = timezone(timedelta(hours=2))
    value = datetime(2026, 1, 1, 10, 0, tzinfo=plus_two)
    assert as_utc(value) == datetime(2026, 1, 1, 8, 0, tzinfo=timezone.utc)


def test_state_of_normalizes_naive_expiry():
    class FakeInvite:
        is_revoked = False
        expires_at = datetime(2030, 1, 1)
        current_uses = 0
        max_uses = 2

    state = InviteState.of(FakeInvite())
    assert state.expires_at.tzinfo is timezone.utc
    assert state.max_uses == 2
