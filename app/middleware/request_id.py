"""Request ID middleware.

Forwards the caller's X-Request-ID (or generates one), echoes it on the
response and tags the active trace span with it, so webhook deliveries
can be matched to the workflow runs they started. Client values are
limited to a safe character set and length before they reach logs.
Raw ASGI (no BaseHTTPMiddleware).
"""

import re
import uuid
from typing import Callable

from app.shared.telemetry.tracing import add_span_attributes

REQUEST_ID_MAX_LENGTH = 64
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,%d}$" % REQUEST_ID_MAX_LENGTH)


def _header_value(scope: dict, name: bytes) -> str | None:
    for key, value in scope.get("headers", []):
        if key.lower() == name:
            return value.decode("latin-1")
    return None


def resolve_request_id(raw: str | None) -> str:
    """Return raw when it is a safe id; otherwise a fresh UUID4 hex."""
    candidate = (raw or "").strip()
    if candidate and _REQUEST_ID_PATTERN.match(candidate):
        return candidate
    return uuid.uuid4().hex


def RequestIDMiddleware(app: Callable, header_name: str = "X-Request-ID") -> Callable:
    """Wrap an ASGI app so every HTTP response carries a request id header."""
    header_key = header_name.lower().encode("latin-1")

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = resolve_request_id(_header_value(scope, header_key))
        scope.setdefault("state", {})["request_id"] = request_id
        add_span_attributes(request_id=request_id)

        async def send_with_id(message: dict) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [
                    *message.get("headers", []),
                    (header_key, request_id.encode("latin-1")),
                ]
            await send(message)

        await app(scope, receive, send_with_id)

    return asgi_app
