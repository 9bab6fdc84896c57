"""
frisk.tier1_runtime.resolve
────────────────────────────
Field resolution: where a top-level field's value comes from.

A request is anything exposing ``body``, ``query`` and ``params`` mappings
(a missing or ``None`` container counts as empty). Frisk never mutates them:
the merged view is a fresh dict.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from frisk.tier1_runtime.schema import FieldDefinition, Location


class _Missing:
    """Sentinel for an absent key. Distinct from None, 0, "" and False."""

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

# Lowest to highest precedence on key collision.
MERGE_ORDER: tuple[Location, ...] = (Location.BODY, Location.QUERY, Location.PARAMS)


# ── Request shape ──────────────────────────────────────────────────────────

class Request(Protocol):
    """What frisk needs from a framework request object."""

    body: Mapping[str, Any] | None
    query: Mapping[str, Any] | None
    params: Mapping[str, Any] | None


@dataclass(frozen=True)
class RequestParts:
    """Plain Request implementation used by the framework adapters and tests."""

    body: Mapping[str, Any] = field(default_factory=dict)
    query: Mapping[str, Any] = field(default_factory=dict)
    params: Mapping[str, Any] = field(default_factory=dict)


# ── Resolution ─────────────────────────────────────────────────────────────

def container(request: Any, location: Location) -> Mapping[str, Any]:
    """Return the named sub-container of *request*, or an empty mapping."""
    value = getattr(request, location.value, None)
    if isinstance(value, Mapping):
        return value
    return {}


def merged_view(request: Any) -> dict[str, Any]:
    """
    Overlay body, query and params into a new dict; params wins on collision.

    The overlay is shallow: when two containers hold the same key, the later
    value replaces the earlier one whole, nested objects included.
    """
    merged: dict[str, Any] = {}
    for location in MERGE_ORDER:
        merged.update(container(request, location))
    return merged


def resolve_value(
    definition: FieldDefinition,
    name: str,
    request: Any,
    merged: Mapping[str, Any] | None = None,
) -> Any:
    """
    Return the candidate value for top-level field *name*, or MISSING.

    A field with a location is looked up only in that container, with no
    fallback. Otherwise it is looked up in *merged* (built from *request*
    if not supplied).
    """
    if definition.location is not None:
        source = container(request, definition.location)
    else:
        source = merged if merged is not None else merged_view(request)
    return source[name] if name in source else MISSING


__all__ = [
    "MISSING",
    "MERGE_ORDER",
    "Request",
    "RequestParts",
    "container",
    "merged_view",
    "resolve_value",
]
