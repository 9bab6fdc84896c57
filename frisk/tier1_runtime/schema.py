"""
frisk.tier1_runtime.schema
───────────────────────────
Schema compiler. A schema is static data (a mapping of field name to field
definition), checked once when a validator is built so that a malformed
schema fails route registration instead of every request.

A field definition is a mapping with:
    type        one of the FieldType names (or a FieldType member)
    required    bool, default False
    properties  nested schema, only for ``object`` fields
    location    ``body`` | ``query`` | ``params`` (``path`` is accepted as an
                alias of ``params``); may also be spelled ``in``

Usage::

    compiled = compile_schema({
        "id": {"type": "uuid", "required": True, "in": "path"},
        "name": {"type": "string", "in": "body"},
    })
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    field_validator,
    model_validator,
)

from frisk.tier0_core.config import get_config
from frisk.tier0_core.errors import ConfigurationError
from frisk.tier0_core.logging import get_logger
from frisk.tier1_runtime.types import FieldType


# ── Locations ──────────────────────────────────────────────────────────────

class Location(str, Enum):
    """Request sub-container a field is read from. Definition order is pass order."""

    BODY = "body"
    QUERY = "query"
    PARAMS = "params"

    def __str__(self) -> str:
        return self.value


_LOCATION_ALIASES: dict[str, Location] = {"path": Location.PARAMS}
_LOCATION_NAMES = ", ".join(loc.value for loc in Location)
_TYPE_NAMES = ", ".join(t.value for t in FieldType)


# ── Field definition ───────────────────────────────────────────────────────

class FieldDefinition(BaseModel):
    """One validated schema entry. Immutable once built."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    type: FieldType
    required: bool = False
    properties: Optional[dict[str, FieldDefinition]] = None
    location: Optional[Location] = Field(
        default=None,
        validation_alias=AliasChoices("location", "in"),
    )

    @field_validator("type", mode="before")
    @classmethod
    def known_type(cls, v: Any) -> FieldType:
        if isinstance(v, FieldType):
            return v
        if isinstance(v, str):
            try:
                return FieldType(v)
            except ValueError:
                pass
        raise ValueError(f"unrecognized type {v!r}; expected one of {_TYPE_NAMES}")

    @field_validator("location", mode="before")
    @classmethod
    def known_location(cls, v: Any) -> Location | None:
        if v is None or isinstance(v, Location):
            return v
        if isinstance(v, str):
            if v in _LOCATION_ALIASES:
                return _LOCATION_ALIASES[v]
            try:
                return Location(v)
            except ValueError:
                pass
        raise ValueError(f"invalid location {v!r}; expected one of {_LOCATION_NAMES}")

    @model_validator(mode="after")
    def properties_only_on_objects(self) -> FieldDefinition:
        if self.properties is not None and self.type is not FieldType.OBJECT:
            raise ValueError(
                f"properties is only allowed on fields of type object, not {self.type.value}"
            )
        return self


# ── Compiled schema ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CompiledSchema:
    """A schema that passed compile_schema(). Safe to share across requests."""

    fields: Mapping[str, FieldDefinition]
    strict: bool = False
    uses_location: bool = False
    by_location: Mapping[Location, Mapping[str, FieldDefinition]] = field(
        default_factory=lambda: MappingProxyType({})
    )


# ── Compiler ───────────────────────────────────────────────────────────────

def _field_path(name: str, loc: tuple[Any, ...]) -> tuple[str, str | None]:
    """
    Map a pydantic error location inside field *name* to
    (dotted field path, offending attribute).
    """
    path = [name]
    attribute: str | None = None
    parts = list(loc)
    while parts:
        part = parts.pop(0)
        if part == "properties" and parts:
            path.append(str(parts.pop(0)))
            attribute = None
        else:
            attribute = str(part)
    return ".".join(path), attribute


def _parse_definition(name: str, definition: Any) -> FieldDefinition:
    if isinstance(definition, FieldDefinition):
        return definition
    if not isinstance(definition, Mapping):
        raise ConfigurationError(
            f"Field {name!r} must be defined by a mapping, got {type(definition).__name__}",
            field=name,
        )
    try:
        return FieldDefinition.model_validate(dict(definition))
    except PydanticValidationError as exc:
        err = exc.errors()[0]
        path, attribute = _field_path(name, tuple(err["loc"]))
        message = err["msg"].removeprefix("Value error, ")
        where = f"{path}.{attribute}" if attribute else path
        raise ConfigurationError(
            f"Invalid field definition for {path!r}: {where}: {message}",
            field=path,
            invalid_value=err.get("input"),
        ) from exc


def _check_nested(
    fields: Mapping[str, FieldDefinition],
    prefix: str,
    depth: int,
    max_depth: int,
) -> None:
    for name, definition in fields.items():
        path = f"{prefix}.{name}" if prefix else name
        if depth > 1 and definition.location is not None:
            raise ConfigurationError(
                f"Field {path!r} declares location {definition.location.value!r}; "
                "locations are only allowed on top-level fields",
                field=path,
            )
        if definition.properties:
            if depth >= max_depth:
                raise ConfigurationError(
                    f"Field {path!r} nests deeper than the maximum schema depth of {max_depth}",
                    field=path,
                )
            _check_nested(definition.properties, path, depth + 1, max_depth)


def compile_schema(
    schema: Any,
    strict: bool | None = None,
    *,
    max_depth: int | None = None,
) -> CompiledSchema:
    """
    Validate *schema* and return a CompiledSchema.

    Raises ConfigurationError if the schema is not a mapping, a field
    definition is malformed, or locations are declared inconsistently
    (either every top-level field declares one or none does).
    *strict* and *max_depth* default to FRISK_STRICT / FRISK_MAX_SCHEMA_DEPTH.
    """
    config = get_config()
    if strict is None:
        strict = config.strict
    if max_depth is None:
        max_depth = config.max_schema_depth

    if not isinstance(schema, Mapping):
        raise ConfigurationError(
            "Validation schema must be a mapping of field name to field definition, "
            f"got {type(schema).__name__}"
        )

    fields: dict[str, FieldDefinition] = {}
    for name, definition in schema.items():
        if not isinstance(name, str):
            raise ConfigurationError(f"Field names must be strings, got {name!r}")
        fields[name] = _parse_definition(name, definition)

    uses_location = any(d.location is not None for d in fields.values())
    by_location: dict[Location, Mapping[str, FieldDefinition]] = {}
    if uses_location:
        for name, definition in fields.items():
            if definition.location is None:
                raise ConfigurationError(
                    f"Field {name!r} must declare a location: other fields in this "
                    f"schema do (one of {_LOCATION_NAMES})",
                    field=name,
                )
        for location in Location:
            by_location[location] = MappingProxyType({
                name: d for name, d in fields.items() if d.location is location
            })

    _check_nested(fields, "", 1, max_depth)

    get_logger(__name__).debug(
        "schema.compiled",
        field_count=len(fields),
        uses_location=uses_location,
        strict=strict,
    )
    return CompiledSchema(
        fields=MappingProxyType(fields),
        strict=bool(strict),
        uses_location=uses_location,
        by_location=MappingProxyType(by_location),
    )


__all__ = ["Location", "FieldDefinition", "CompiledSchema", "compile_schema"]
