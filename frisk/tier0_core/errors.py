"""
frisk.tier0_core.errors
────────────────────────
Error taxonomy for frisk. Configuration errors are raised at schema setup
time; validation failures are normally returned as data, and only become a
ValidationError when a caller explicitly asks for an exception.

Raising a FriskError reports it if an error backend is configured.

Select via:    FRISK_ERROR_BACKEND=sentry|otel|none
"""
from __future__ import annotations

from typing import Any, Iterable

from frisk.tier0_core.config import get_config
from frisk.tier0_core.http import invalid_request_payload


# ── Base error ────────────────────────────────────────────────────────────────

class FriskError(Exception):
    """
    Base class for all frisk errors. Every error has:
    - code: stable machine-readable string (snake_case)
    - user_message: safe to surface to end users
    - detail: internal context, never shown to users
    - status_code: HTTP status code for API responses
    """

    status_code: int = 500
    code: str = "internal_error"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "An unexpected error occurred.",
        detail: str | None = None,
        **metadata: Any,
    ) -> None:
        self.code = code or self.__class__.code
        self.user_message = user_message
        self.detail = detail or user_message
        self.metadata = metadata
        super().__init__(self.detail)
        _capture(self)

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.user_message,
            }
        }


# ── Typed error classes ───────────────────────────────────────────────────────

class ConfigurationError(FriskError):
    """Malformed schema detected while a validator is being set up."""
    status_code = 500
    code = "configuration_error"

    def __init__(
        self,
        user_message: str = "Invalid validation schema.",
        field: str | None = None,
        **metadata: Any,
    ) -> None:
        self.field = field
        super().__init__(None, user_message, **metadata)


class ValidationError(FriskError):
    """
    A request failed validation. Carries the full, ordered error list.
    to_dict() returns the same payload the middleware sends on rejection.
    """
    status_code = 400
    code = "validation_error"

    def __init__(
        self,
        errors: Iterable[Any] = (),
        user_message: str = "Invalid Request",
        **metadata: Any,
    ) -> None:
        self.errors = list(errors)
        super().__init__(None, user_message, **metadata)

    def to_dict(self) -> dict:
        return invalid_request_payload(self.errors, message=self.user_message)


# ── Error capture backend ─────────────────────────────────────────────────────

def _capture(error: FriskError) -> None:
    """Send error to configured backend. Called automatically by FriskError.__init__."""
    backend = get_config().error_backend.lower()
    if backend == "none":
        return
    if backend == "sentry":
        _capture_sentry(error)
    elif backend == "otel":
        _capture_otel(error)


def _capture_sentry(error: FriskError) -> None:
    try:
        import sentry_sdk
        if error.status_code >= 500:
            sentry_sdk.capture_exception(error)
        else:
            sentry_sdk.capture_message(
                str(error),
                level="warning",
                extras={"code": error.code, **error.metadata},
            )
    except ImportError:
        pass


def _capture_otel(error: FriskError) -> None:
    try:
        from opentelemetry import trace
    except ImportError:
        return
    span = trace.get_current_span()
    span.record_exception(error)
    span.set_status(trace.StatusCode.ERROR, str(error))


__all__ = ["FriskError", "ConfigurationError", "ValidationError"]
