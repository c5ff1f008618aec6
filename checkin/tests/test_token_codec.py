from datetime import timedelta

import pytest

from checkin.utils import tokenCodec
from checkin.utils.clock import epoch_millis
from checkin.utils.errors import TokenExpired, TokenMalformed

from conftest import at

NOW = at(9, 15)
T = epoch_millis(NOW)


def test_fresh_token_is_parsed():
    token = tokenCodec.parse(f"CHECKIN-evt1-secretX-{T}", NOW)
    assert token.event_id == "evt1"
    assert token.secret == "secretX"
    assert token.issued_at_ms == T


def test_token_at_end_of_window_is_still_valid():
    token = tokenCodec.parse(f"CHECKIN-evt1-secretX-{T}", NOW + timedelta(milliseconds=10_000))
    assert token.issued_at_ms == T


def test_token_past_window_is_expired():
    with pytest.raises(TokenExpired):
        tokenCodec.parse(f"CHECKIN-evt1-secretX-{T}", NOW + timedelta(milliseconds=10_001))


def test_future_dated_token_is_expired():
    with pytest.raises(TokenExpired):
        tokenCodec.parse(f"CHECKIN-evt1-secretX-{T}", NOW - timedelta(milliseconds=1))


@pytest.mark.parametrize(
    "raw",
    [
        "CHECKIN-onlytwoparts",
        "CHECKIN-evt1-secretX",
        "checkin-evt1-secretX-123",
        "PAY-evt1-secretX-123",
        "CHECKIN-evt1-secretX-12a3",
        "CHECKIN-evt1-secretX-",
        "CHECKIN-evt1-secretX- 123",
        "CHECKIN-evt1-secretX-" + "9" * 5000,
        "",
    ],
)
def test_malformed_tokens(raw):
    with pytest.raises(TokenMalformed):
        tokenCodec.parse(raw, NOW)


def test_prefix_is_checked_before_freshness():
    with pytest.raises(TokenMalformed):
        tokenCodec.parse(f"CHECK-evt1-secretX-{T - 60_000}", NOW)


def test_extra_segments_are_ignored():
    token = tokenCodec.parse(f"CHECKIN-evt1-secretX-{T}-trailing", NOW)
    assert token.issued_at_ms == T


def test_issue_embeds_the_current_instant():
    raw = tokenCodec.issue("evt1", "secretX", NOW)
    assert raw == f"CHECKIN-evt1-secretX-{T}"
    assert tokenCodec.parse(raw, NOW + timedelta(seconds=7)).event_id == "evt1"


@pytest.mark.parametrize("event_id, secret", [("evt-1", "secretX"), ("evt1", "se-cret"), ("", "secretX")])
def test_issue_refuses_ids_that_would_not_round_trip(event_id, secret):
    with pytest.raises(ValueError):
        tokenCodec.issue(event_id, secret, NOW)
