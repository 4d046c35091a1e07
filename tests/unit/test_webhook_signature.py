"""Tests for Svix webhook signature verification."""

import base64
from datetime import UTC, datetime, timedelta

import pytest

from app.infrastructure.security.webhook_signature import (
    sign_svix_payload,
    verify_svix_signature,
)

SECRET = "whsec_" + base64.b64encode(b"clerk-test-signing-key").decode()
NOW = datetime(2026, 6, 8, 9, 0, tzinfo=UTC)
TS = str(int(NOW.timestamp()))
BODY = b'{"type":"user.created","data":{"id":"user_1"}}'


def test_valid_signature_accepted() -> None:
    signature = sign_svix_payload(SECRET, "msg_1", TS, BODY)
    assert signature.startswith("v1,")
    assert verify_svix_signature(SECRET, "msg_1", TS, signature, BODY, now=NOW)


def test_any_matching_entry_accepted_during_rotation() -> None:
    signature = sign_svix_payload(SECRET, "msg_1", TS, BODY)
    header = f"v1,b2xkLXNpZ25hdHVyZQ== {signature}"
    assert verify_svix_signature(SECRET, "msg_1", TS, header, BODY, now=NOW)


def test_tampered_body_rejected() -> None:
    signature = sign_svix_payload(SECRET, "msg_1", TS, BODY)
    assert not verify_svix_signature(SECRET, "msg_1", TS, signature, BODY + b" ", now=NOW)


def test_other_message_id_rejected() -> None:
    signature = sign_svix_payload(SECRET, "msg_1", TS, BODY)
    assert not verify_svix_signature(SECRET, "msg_2", TS, signature, BODY, now=NOW)


def test_stale_timestamp_rejected() -> None:
    signature = sign_svix_payload(SECRET, "msg_1", TS, BODY)
    later = NOW + timedelta(minutes=6)
    assert not verify_svix_signature(SECRET, "msg_1", TS, signature, BODY, now=later)


@pytest.mark.parametrize(
    ("msg_id", "timestamp", "header"),
    [
        (None, TS, "v1,abc"),
        ("msg_1", None, "v1,abc"),
        ("msg_1", TS, None),
        ("msg_1", "not-a-number", "v1,abc"),
    ],
)
def test_missing_or_malformed_headers_rejected(msg_id, timestamp, header) -> None:
    assert not verify_svix_signature(SECRET, msg_id, timestamp, header, BODY, now=NOW)


def test_invalid_secret_rejected() -> None:
    assert not verify_svix_signature("whsec_***", "msg_1", TS, "v1,abc", BODY, now=NOW)
    with pytest.raises(ValueError):
        sign_svix_payload("whsec_***", "msg_1", TS, BODY)
