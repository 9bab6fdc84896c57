"""
frisk test configuration.

No HTTP framework is needed: requests are RequestParts, responses are a
recording responder, and the adapters get hand-built environs and scopes.
"""
from __future__ import annotations

import os

import pytest

# ── Force test settings ───────────────────────────────────────────────────
# These must be set before any frisk modules are imported.

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("FRISK_ERROR_BACKEND", "none")
os.environ.setdefault("FRISK_LOG_LEVEL", "WARNING")


# ── Schemas ────────────────────────────────────────────────────────────────

OBJECT_SCHEMA = {
    "someObject": {"required": True, "type": "object"},
}

NESTED_SCHEMA = {
    "someObject": {
        "required": True,
        "type": "object",
        "properties": {
            "foo": {"required": True, "type": "string"},
            "bar": {"required": True, "type": "uuid"},
        },
    },
}

FOOD_SCHEMA = {
    "fruit": {"required": True, "type": "string"},
    "vegetable": {"required": True, "type": "string"},
    "condiment": {"required": True, "type": "string"},
}

_MENU = {
    "required": True,
    "type": "object",
    "properties": {
        "appetizers": {"required": True, "type": "arrayOfStrings"},
        "mains": {"required": True, "type": "arrayOfStrings"},
        "desserts": {"required": True, "type": "arrayOfStrings"},
    },
}

RESTAURANT_SCHEMA = {
    "address": {
        "type": "object",
        "required": True,
        "properties": {
            "streetNumber": {"required": True, "type": "number"},
            "streetName": {"required": True, "type": "string"},
            "city": {"required": True, "type": "string"},
            "province": {"required": True, "type": "string"},
            "apartmentNumber": {"required": False, "type": "number"},
        },
    },
    "name": {"required": True, "type": "string"},
    "menus": {
        "required": True,
        "type": "object",
        "properties": {"lunch": _MENU, "dinner": _MENU},
    },
}

FRUIT_LOCATIONS_SCHEMA = {
    "banana": {"required": True, "type": "string", "in": "query"},
    "strawberry": {"required": True, "type": "string", "in": "path"},
    "mango": {"required": True, "type": "string", "in": "body"},
}

NESTED_BODY_SCHEMA = {
    "address": {
        "type": "object",
        "in": "body",
        "required": True,
        "properties": {
            "streetNumber": {"required": True, "type": "number"},
            "apartmentNumber": {"required": False, "type": "number"},
        },
    },
}

VALID_UUID = "f952de91-d2f1-448a-ad99-abe46da99207"


# ── Fakes ──────────────────────────────────────────────────────────────────

class RecordingResponder:
    """Responder that remembers what it was asked to send."""

    def __init__(self) -> None:
        self.sent: list[tuple[int, dict]] = []

    def send(self, status_code: int, payload: dict) -> str:
        self.sent.append((status_code, payload))
        return "sent"

    @property
    def status(self) -> int | None:
        return self.sent[-1][0] if self.sent else None

    @property
    def payload(self) -> dict | None:
        return self.sent[-1][1] if self.sent else None


class NextSpy:
    """The pipeline's continue signal. Records calls and their arguments."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def __call__(self, *args) -> str:
        self.calls.append(args)
        return "next"

    @property
    def called_once(self) -> bool:
        return len(self.calls) == 1


# ── Fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture
def responder() -> RecordingResponder:
    return RecordingResponder()


@pytest.fixture
def next_spy() -> NextSpy:
    return NextSpy()


@pytest.fixture
def reset_config():
    """Clear the cached config before and after a test that patches env vars."""
    from frisk.tier0_core.config import _reset_config

    _reset_config()
    yield
    _reset_config()
