"""
frisk.tier0_core.http
──────────────────────
HTTP primitives shared by the middleware and the framework adapters: the
status codes frisk emits and the rejection payload envelope.
"""
from __future__ import annotations

from typing import Any, Iterable


# ── Status code constants ──────────────────────────────────────────────────

class HTTP:
    """HTTP status codes used by frisk."""

    OK = 200
    BAD_REQUEST = 400
    INTERNAL_SERVER_ERROR = 500


REASON_PHRASES: dict[int, str] = {
    HTTP.OK: "OK",
    HTTP.BAD_REQUEST: "Bad Request",
    HTTP.INTERNAL_SERVER_ERROR: "Internal Server Error",
}

INVALID_REQUEST_MESSAGE = "Invalid Request"


# ── Response envelope ─────────────────────────────────────────────────────

def status_line(status_code: int) -> str:
    """Return a WSGI status line, e.g. ``"400 Bad Request"``."""
    return f"{status_code} {REASON_PHRASES.get(status_code, '')}".rstrip()


def invalid_request_payload(
    errors: Iterable[Any],
    message: str = INVALID_REQUEST_MESSAGE,
) -> dict[str, Any]:
    """
    Build the body sent when a request is rejected::

        {"message": "Invalid Request",
         "errors": [{"name": "a.b", "error": "a.b is a required field"}]}

    Items may be FieldError records or plain ``{"name", "error"}`` dicts.
    """
    return {
        "message": message,
        "errors": [
            e.as_dict() if hasattr(e, "as_dict") else dict(e)
            for e in errors
        ],
    }


__all__ = [
    "HTTP",
    "INVALID_REQUEST_MESSAGE",
    "status_line",
    "invalid_request_payload",
]
