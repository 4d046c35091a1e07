"""Svix webhook signature verification (used by Clerk webhooks).

Svix signs ``{svix-id}.{svix-timestamp}.{raw body}`` with HMAC-SHA256 using
the base64 secret after the ``whsec_`` prefix. The ``svix-signature``
header holds one or more space-separated ``v1,<base64 digest>`` entries
(several during secret rotation); any match is accepted.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
from datetime import datetime

from app.shared.utils.datetime import utc_now

SECRET_PREFIX = "whsec_"
TIMESTAMP_TOLERANCE_SECONDS = 5 * 60


def _decode_secret(secret: str) -> bytes | None:
    raw = secret[len(SECRET_PREFIX):] if secret.startswith(SECRET_PREFIX) else secret
    try:
        return base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError):
        return None


def sign_svix_payload(secret: str, msg_id: str, timestamp: str, body: bytes) -> str:
    """Return the ``v1,<base64>`` signature for a payload (for tests and local tooling)."""
    key = _decode_secret(secret)
    if key is None:
        raise ValueError("Webhook secret is not valid base64")
    signed = f"{msg_id}.{timestamp}.".encode() + body
    digest = hmac.new(key, signed, hashlib.sha256).digest()
    return "v1," + base64.b64encode(digest).decode()


def verify_svix_signature(
    secret: str,
    msg_id: str | None,
    timestamp: str | None,
    signature_header: str | None,
    body: bytes,
    *,
    now: datetime | None = None,
) -> bool:
    """Return True if the headers carry a valid, fresh signature of body."""
    if not msg_id or not timestamp or not signature_header:
        return False
    try:
        sent_at = int(timestamp)
    except ValueError:
        return False
    current = int((now or utc_now()).timestamp())
    if abs(current - sent_at) > TIMESTAMP_TOLERANCE_SECONDS:
        return False
    try:
        expected = sign_svix_payload(secret, msg_id, timestamp, body)
    except ValueError:
        return False
    expected_sig = expected.split(",", 1)[1]
    for entry in signature_header.split():
        version, _, candidate = entry.partition(",")
        if version == "v1" and hmac.compare_digest(candidate, expected_sig):
            return True
    return False
