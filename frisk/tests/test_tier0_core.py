"""Tests for tier0_core modules."""
from __future__ import annotations

import sys
import types

import pytest

from frisk.tier0_core.errors import ConfigurationError, FriskError, ValidationError
from frisk.tier0_core.http import HTTP, invalid_request_payload, status_line
from frisk.tier1_runtime.validate import FieldError


# ── errors ─────────────────────────────────────────────────────────────────

class TestErrors:
    def test_frisk_error_has_code(self):
        e = FriskError("frisk_error", user_message="Something broke")
        assert e.code == "frisk_error"
        assert "Something broke" in str(e)

    def test_configuration_error_defaults(self):
        e = ConfigurationError("Field 'a' must declare a location", field="a")
        assert isinstance(e, FriskError)
        assert e.code == "configuration_error"
        assert e.field == "a"
        assert "location" in str(e)

    def test_validation_error_is_a_400(self):
        e = ValidationError([FieldError("a", "a is a required field")])
        assert e.status_code == HTTP.BAD_REQUEST
        assert e.errors == [FieldError("a", "a is a required field")]

    def test_validation_error_to_dict_is_rejection_payload(self):
        e = ValidationError([FieldError("a", "a is a required field")])
        assert e.to_dict() == {
            "message": "Invalid Request",
            "errors": [{"name": "a", "error": "a is a required field"}],
        }

    def test_capture_is_noop_without_backend(self, reset_config, monkeypatch):
        monkeypatch.setenv("FRISK_ERROR_BACKEND", "none")
        ConfigurationError("no backend configured")


class FakeSentry(types.ModuleType):
    def __init__(self) -> None:
        super().__init__("sentry_sdk")
        self.exceptions: list = []
        self.messages: list = []

    def capture_exception(self, error):
        self.exceptions.append(error)

    def capture_message(self, message, level=None, extras=None):
        self.messages.append((message, level, extras))


class FakeSpan:
    def __init__(self) -> None:
        self.recorded: list = []
        self.status = None

    def record_exception(self, error):
        self.recorded.append(error)

    def set_status(self, code, description=None):
        self.status = (code, description)


class TestErrorCapture:
    @pytest.fixture
    def sentry(self, reset_config, monkeypatch):
        fake = FakeSentry()
        monkeypatch.setitem(sys.modules, "sentry_sdk", fake)
        monkeypatch.setenv("FRISK_ERROR_BACKEND", "sentry")
        return fake

    @pytest.fixture
    def span(self, reset_config, monkeypatch):
        current = FakeSpan()
        trace = types.ModuleType("opentelemetry.trace")
        trace.get_current_span = lambda: current
        trace.StatusCode = types.SimpleNamespace(ERROR="ERROR")
        package = types.ModuleType("opentelemetry")
        package.trace = trace
        monkeypatch.setitem(sys.modules, "opentelemetry", package)
        monkeypatch.setitem(sys.modules, "opentelemetry.trace", trace)
        monkeypatch.setenv("FRISK_ERROR_BACKEND", "otel")
        return current

    def test_backend_comes_from_config(self, reset_config, monkeypatch):
        from frisk.tier0_core.config import get_config

        monkeypatch.setenv("FRISK_ERROR_BACKEND", "otel")
        assert get_config().error_backend == "otel"

    def test_sentry_captures_server_errors_as_exceptions(self, sentry):
        e = ConfigurationError("bad schema", field="a")
        assert sentry.exceptions == [e]
        assert sentry.messages == []

    def test_sentry_captures_client_errors_as_warnings(self, sentry):
        ValidationError([FieldError("a", "a is a required field")], reason="test")
        assert sentry.exceptions == []
        [(message, level, extras)] = sentry.messages
        assert message == "Invalid Request"
        assert level == "warning"
        assert extras == {"code": "validation_error", "reason": "test"}

    def test_otel_records_on_current_span(self, span):
        e = ConfigurationError("bad schema")
        assert span.recorded == [e]
        assert span.status == ("ERROR", "bad schema")

    def test_unknown_backend_is_ignored(self, reset_config, monkeypatch):
        fake = FakeSentry()
        monkeypatch.setitem(sys.modules, "sentry_sdk", fake)
        monkeypatch.setenv("FRISK_ERROR_BACKEND", "carrier-pigeon")
        ConfigurationError("bad schema")
        assert fake.exceptions == []


# ── http ───────────────────────────────────────────────────────────────────

class TestHttp:
    def test_status_codes(self):
        assert HTTP.OK == 200
        assert HTTP.BAD_REQUEST == 400

    def test_status_line(self):
        assert status_line(400) == "400 Bad Request"
        assert status_line(299) == "299"

    def test_payload_accepts_records_and_dicts(self):
        payload = invalid_request_payload([
            FieldError("a", "a is a required field"),
            {"name": "b", "error": "b is not an allowed field"},
        ])
        assert payload["message"] == "Invalid Request"
        assert payload["errors"] == [
            {"name": "a", "error": "a is a required field"},
            {"name": "b", "error": "b is not an allowed field"},
        ]

    def test_empty_payload(self):
        assert invalid_request_payload([]) == {"message": "Invalid Request", "errors": []}


# ── config ─────────────────────────────────────────────────────────────────

class TestConfig:
    def test_defaults(self, reset_config, monkeypatch):
        monkeypatch.delenv("FRISK_STRICT", raising=False)
        monkeypatch.delenv("FRISK_MAX_SCHEMA_DEPTH", raising=False)
        from frisk.tier0_core.config import get_config

        config = get_config()
        assert config.strict is False
        assert config.max_schema_depth == 32
        assert config.is_test

    def test_env_overrides(self, reset_config, monkeypatch):
        monkeypatch.setenv("FRISK_STRICT", "true")
        monkeypatch.setenv("FRISK_MAX_SCHEMA_DEPTH", "4")
        from frisk.tier0_core.config import get_config

        config = get_config()
        assert config.strict is True
        assert config.max_schema_depth == 4

    def test_config_is_cached(self, reset_config):
        from frisk.tier0_core.config import get_config

        assert get_config() is get_config()

    def test_invalid_environment_rejected(self, reset_config, monkeypatch):
        from pydantic import ValidationError as PydanticValidationError

        from frisk.tier0_core.config import FriskConfig

        monkeypatch.setenv("APP_ENV", "moon")
        with pytest.raises(PydanticValidationError):
            FriskConfig()


# ── logging ────────────────────────────────────────────────────────────────

class TestLogging:
    def test_redacts_sensitive_keys(self):
        from frisk.tier0_core.logging import _REDACTED, _redact_processor

        event = _redact_processor(None, "info", {"event": "x", "Authorization": "Bearer abc"})
        assert event["Authorization"] == _REDACTED
        assert event["event"] == "x"

    def test_get_logger_returns_usable_logger(self):
        from frisk.tier0_core.logging import get_logger

        log = get_logger("frisk.tests")
        log.info("request.rejected", error_count=1, fields=["a"])
