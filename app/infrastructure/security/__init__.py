"""Security: inbound webhook signature verification."""

from app.infrastructure.security.webhook_signature import (
    sign_svix_payload,
    verify_svix_signature,
)

__all__ = [
    "sign_svix_payload",
    "verify_svix_signature",
]
