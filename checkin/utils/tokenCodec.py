"""Check-in token wire format: ``CHECKIN-{event_id}-{secret}-{issued_at_ms}``.

The hyphen is both the field delimiter and a legal character of an opaque
id, so ids or secrets containing one cannot round-trip. Parsing keeps the
naive split and ignores trailing segments; issuing refuses such ids.
"""
from datetime import datetime

from pydantic import BaseModel

from checkin.config import TOKEN_FRESHNESS_MS
from checkin.utils.clock import epoch_millis
from checkin.utils.errors import TokenExpired, TokenMalformed

PREFIX = "CHECKIN-"
DELIMITER = "-"


class ParsedToken(BaseModel):
    event_id: str
    secret: str
    issued_at_ms: int

    class Config:
        frozen = True


def _is_base10(segment: str) -> bool:
    return segment.isascii() and segment.isdigit()


def parse(raw: str, now: datetime) -> ParsedToken:
    if not raw.startswith(PREFIX):
        raise TokenMalformed("Token does not start with CHECKIN-")

    parts = raw.split(DELIMITER)
    if len(parts) < 4:
        raise TokenMalformed("Token must have four hyphen-delimited fields")

    _, event_id, secret, issued_at = parts[:4]
    if not _is_base10(issued_at):
        raise TokenMalformed("Token timestamp is not an integer")
    try:
        issued_at_ms = int(issued_at)
    except ValueError:
        # int() refuses digit strings past sys.get_int_max_str_digits()
        raise TokenMalformed("Token timestamp is too long") from None

    age_ms = epoch_millis(now) - issued_at_ms
    if age_ms < 0 or age_ms > TOKEN_FRESHNESS_MS:
        raise TokenExpired(f"Token age {age_ms}ms is outside the freshness window")

    return ParsedToken(event_id=event_id, secret=secret, issued_at_ms=issued_at_ms)


def issue(event_id: str, secret: str, now: datetime) -> str:
    for field, value in (("event_id", event_id), ("secret", secret)):
        if not value or DELIMITER in value:
            raise ValueError(f"{field} must be non-empty and free of '{DELIMITER}'")
    return f"{PREFIX}{event_id}{DELIMITER}{secret}{DELIMITER}{epoch_millis(now)}"
