"""
frisk.tier1_runtime.validate
─────────────────────────────
The validation engine. Walks a compiled schema alongside the request values
and returns an ordered list of FieldError records; an empty list means the
request is valid. Nothing in here raises for bad input; every problem with
the request becomes a FieldError.

Ordering, per nesting level:
  1. declared fields in schema order, each fully (depth-first) before the next
  2. then, in strict mode, that level's undeclared keys in container order

so a parent's extraneous-field errors always follow its children's errors.
For location-aware schemas the passes run body, then query, then params.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from frisk.tier1_runtime.resolve import MISSING, container, merged_view, resolve_value
from frisk.tier1_runtime.schema import CompiledSchema, FieldDefinition, Location
from frisk.tier1_runtime.types import FieldType, parse_object


@dataclass(frozen=True)
class FieldError:
    """One validation problem. ``name`` is the dotted path of the field."""

    name: str
    error: str

    def as_dict(self) -> dict[str, str]:
        return {"name": self.name, "error": self.error}


def join_key(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


def required_error(full_key: str) -> FieldError:
    return FieldError(full_key, f"{full_key} is a required field")


def type_error(full_key: str, field_type: FieldType) -> FieldError:
    return FieldError(full_key, f"{full_key} must be of type {field_type.value}")


def not_allowed_error(full_key: str) -> FieldError:
    return FieldError(full_key, f"{full_key} is not an allowed field")


# ── Property validator ─────────────────────────────────────────────────────

def validate_property(
    full_key: str,
    value: Any,
    definition: FieldDefinition,
    strict: bool = False,
) -> list[FieldError]:
    """Validate one resolved value. *value* is MISSING when the key is absent."""
    if value is MISSING:
        return [required_error(full_key)] if definition.required else []

    if not definition.type.check(value):
        return [type_error(full_key, definition.type)]

    if definition.type is FieldType.OBJECT and definition.properties is not None:
        return validate_object(definition.properties, value, full_key, strict)
    return []


# ── Object validator ───────────────────────────────────────────────────────

def validate_object(
    schema: Mapping[str, FieldDefinition],
    values: Any,
    prefix: str = "",
    strict: bool = False,
) -> list[FieldError]:
    """
    Validate the mapping *values* against *schema* (one nesting level plus
    everything below it). JSON text is decoded first; if that fails, the
    whole subtree collapses into a single type error on *prefix*.

    At the top level (empty *prefix*) there is no field to blame, so a value
    that is not an object counts as an empty container.
    """
    mapping = parse_object(values)
    if mapping is None:
        if not prefix:
            mapping = {}
        else:
            return [type_error(prefix, FieldType.OBJECT)]

    errors: list[FieldError] = []
    for name, definition in schema.items():
        value = mapping[name] if name in mapping else MISSING
        errors.extend(validate_property(join_key(prefix, name), value, definition, strict))

    if strict:
        errors.extend(
            not_allowed_error(join_key(prefix, str(key)))
            for key in mapping
            if key not in schema
        )
    return errors


# ── Request validator ──────────────────────────────────────────────────────

def check_request(compiled: CompiledSchema, request: Any) -> list[FieldError]:
    """
    Validate a whole request against *compiled*.

    Without locations every field is read from the merged body/query/params
    view and strict mode considers every key of that view. With locations
    each container is validated on its own, against only the fields that
    declare it, and strict mode is scoped to that container.
    """
    if not compiled.uses_location:
        merged = merged_view(request)
        errors: list[FieldError] = []
        for name, definition in compiled.fields.items():
            value = resolve_value(definition, name, request, merged)
            errors.extend(validate_property(name, value, definition, compiled.strict))
        if compiled.strict:
            errors.extend(
                not_allowed_error(str(key)) for key in merged if key not in compiled.fields
            )
        return errors

    errors = []
    for location in Location:
        errors.extend(
            validate_object(
                compiled.by_location[location],
                container(request, location),
                "",
                compiled.strict,
            )
        )
    return errors


__all__ = [
    "FieldError",
    "validate_property",
    "validate_object",
    "check_request",
]
