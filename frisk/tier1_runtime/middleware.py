"""
frisk.tier1_runtime.middleware
───────────────────────────────
Request validation middleware. ``validate_request(schema)`` compiles the
schema once and returns a RequestValidator, a pipeline step with the shape
``(request, responder, call_next)``: on failure it sends a 400 with the
full error list, otherwise it hands over to ``call_next()``.

ASGI and WSGI adapters wrap an application (typically a single route's
handler) and feed it through the same validator.

Supports: FastAPI / Starlette (ASGI), Flask / any WSGI app.
"""
from __future__ import annotations

import io
import json
from collections.abc import Mapping
from typing import Any, Callable, Protocol
from urllib.parse import parse_qs

from frisk.tier0_core.errors import ValidationError
from frisk.tier0_core.http import HTTP, invalid_request_payload, status_line
from frisk.tier0_core.logging import get_logger
from frisk.tier1_runtime.resolve import RequestParts
from frisk.tier1_runtime.schema import CompiledSchema, compile_schema
from frisk.tier1_runtime.validate import FieldError, check_request


class Responder(Protocol):
    """The response capability the validator needs: send a status and a payload."""

    def send(self, status_code: int, payload: dict[str, Any]) -> Any: ...


# ── Framework-agnostic validator ───────────────────────────────────────────

class RequestValidator:
    """
    Pipeline step validating each request against one compiled schema.

    Usage::

        validator = validate_request({"id": {"type": "uuid", "required": True}})

        def handle(request, responder):
            return validator(request, responder, lambda: do_work(request))
    """

    def __init__(self, schema: Any, strict: bool | None = None) -> None:
        if isinstance(schema, CompiledSchema):
            self.schema = schema
        else:
            self.schema = compile_schema(schema, strict)

    def check(self, request: Any) -> list[FieldError]:
        """Return the ordered error list for *request*; empty when valid."""
        return check_request(self.schema, request)

    def validate_or_raise(self, request: Any) -> None:
        """Raise ValidationError carrying every error if *request* is invalid."""
        errors = self.check(request)
        if errors:
            raise ValidationError(errors)

    def __call__(
        self,
        request: Any,
        responder: Responder,
        call_next: Callable[[], Any],
    ) -> Any:
        errors = self.check(request)
        if errors:
            get_logger(__name__).info(
                "request.rejected",
                error_count=len(errors),
                fields=[e.name for e in errors],
            )
            return responder.send(HTTP.BAD_REQUEST, invalid_request_payload(errors))
        get_logger(__name__).debug("request.accepted")
        return call_next()


def validate_request(schema: Any, strict: bool | None = None) -> RequestValidator:
    """
    Build a validator for *schema*. Raises ConfigurationError right away if
    the schema is malformed. *strict* defaults to FRISK_STRICT.
    """
    return RequestValidator(schema, strict)


# ── Parsing helpers ────────────────────────────────────────────────────────

def _query_dict(raw: str) -> dict[str, Any]:
    """Decode a query string; repeated keys become lists."""
    parsed = parse_qs(raw, keep_blank_values=True)
    return {key: values[0] if len(values) == 1 else values for key, values in parsed.items()}


def _body_dict(raw: bytes, content_type: str) -> dict[str, Any]:
    """Decode a JSON or form body. Anything else, or a malformed body, is empty."""
    if not raw:
        return {}
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type == "application/x-www-form-urlencoded":
        return _query_dict(raw.decode("latin-1"))
    if media_type == "application/json" or media_type.endswith("+json"):
        try:
            body = json.loads(raw)
        except (ValueError, RecursionError):
            get_logger(__name__).debug("request.body_unparseable", content_type=media_type)
            return {}
        if isinstance(body, Mapping):
            return dict(body)
        get_logger(__name__).debug("request.body_not_object", content_type=media_type)
    return {}


def _encode(payload: dict[str, Any]) -> bytes:
    return json.dumps(payload).encode()


# ── ASGI middleware ────────────────────────────────────────────────────────

class _ASGIResponder:
    def __init__(self, send: Any) -> None:
        self._send = send

    async def send(self, status_code: int, payload: dict[str, Any]) -> None:
        body = _encode(payload)
        await self._send({
            "type": "http.response.start",
            "status": status_code,
            "headers": [
                (b"content-type", b"application/json"),
                (b"content-length", str(len(body)).encode()),
            ],
        })
        await self._send({"type": "http.response.body", "body": body})


class FriskASGIMiddleware:
    """
    ASGI middleware validating every HTTP request before it reaches *app*.
    The request body is buffered and replayed to *app* unchanged.

    Usage (Starlette route)::

        from frisk import FriskASGIMiddleware
        Route("/orders/{id}", FriskASGIMiddleware(create_order, ORDER_SCHEMA))
    """

    def __init__(self, app: Any, schema: Any, strict: bool | None = None) -> None:
        self.app = app
        self.validator = validate_request(schema, strict)

    async def __call__(self, scope: dict, receive: Any, send: Any) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        raw = await _read_asgi_body(receive)
        headers = dict(scope.get("headers", []))
        request = RequestParts(
            body=_body_dict(raw, headers.get(b"content-type", b"").decode("latin-1")),
            query=_query_dict(scope.get("query_string", b"").decode("latin-1")),
            params=dict(scope.get("path_params") or {}),
        )

        replayed = False

        async def replay() -> dict:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": raw, "more_body": False}
            return await receive()

        await self.validator(
            request,
            _ASGIResponder(send),
            lambda: self.app(scope, replay, send),
        )


async def _read_asgi_body(receive: Any) -> bytes:
    chunks: list[bytes] = []
    while True:
        message = await receive()
        if message["type"] != "http.request":
            break
        chunks.append(message.get("body", b""))
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


# ── WSGI middleware ────────────────────────────────────────────────────────

class _WSGIResponder:
    def __init__(self, start_response: Callable) -> None:
        self._start_response = start_response

    def send(self, status_code: int, payload: dict[str, Any]) -> list[bytes]:
        body = _encode(payload)
        self._start_response(status_line(status_code), [
            ("Content-Type", "application/json"),
            ("Content-Length", str(len(body))),
        ])
        return [body]


class FriskWSGIMiddleware:
    """
    WSGI middleware validating every request before it reaches *app*.
    Path parameters are read from ``wsgiorg.routing_args``; the body is
    re-buffered into ``wsgi.input`` so *app* can still read it.

    Usage (Flask)::

        from frisk import FriskWSGIMiddleware
        app.wsgi_app = FriskWSGIMiddleware(app.wsgi_app, SEARCH_SCHEMA)
    """

    def __init__(self, app: Callable, schema: Any, strict: bool | None = None) -> None:
        self.app = app
        self.validator = validate_request(schema, strict)

    def __call__(self, environ: dict, start_response: Callable) -> Any:
        try:
            length = int(environ.get("CONTENT_LENGTH") or 0)
        except ValueError:
            length = 0
        raw = environ["wsgi.input"].read(length) if length > 0 else b""
        environ["wsgi.input"] = io.BytesIO(raw)

        routing_args = environ.get("wsgiorg.routing_args")
        params: Mapping[str, Any] = {}
        if isinstance(routing_args, tuple) and len(routing_args) == 2:
            if isinstance(routing_args[1], Mapping):
                params = routing_args[1]

        request = RequestParts(
            body=_body_dict(raw, environ.get("CONTENT_TYPE", "")),
            query=_query_dict(environ.get("QUERY_STRING", "")),
            params=dict(params),
        )
        return self.validator(
            request,
            _WSGIResponder(start_response),
            lambda: self.app(environ, start_response),
        )


__all__ = [
    "Responder",
    "RequestValidator",
    "validate_request",
    "FriskASGIMiddleware",
    "FriskWSGIMiddleware",
]
