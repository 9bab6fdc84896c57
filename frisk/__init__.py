"""
frisk
─────
Stable top-level exports. Import from here, not from sub-modules directly.
Every name exported here is part of the public API and subject to semver.
"""
from frisk.tier0_core.config import FriskConfig, get_config
from frisk.tier0_core.errors import ConfigurationError, FriskError, ValidationError
from frisk.tier0_core.logging import get_logger

from frisk.tier1_runtime.types import FieldType
from frisk.tier1_runtime.schema import (
    CompiledSchema,
    FieldDefinition,
    Location,
    compile_schema,
)
from frisk.tier1_runtime.resolve import MISSING, RequestParts, merged_view
from frisk.tier1_runtime.validate import (
    FieldError,
    check_request,
    validate_object,
    validate_property,
)
from frisk.tier1_runtime.middleware import (
    FriskASGIMiddleware,
    FriskWSGIMiddleware,
    RequestValidator,
    validate_request,
)

__version__ = "0.1.0"
__all__ = [
    # config
    "get_config", "FriskConfig",
    # errors
    "FriskError", "ConfigurationError", "ValidationError",
    # logging
    "get_logger",
    # types
    "FieldType",
    # schema
    "compile_schema", "CompiledSchema", "FieldDefinition", "Location",
    # resolve
    "MISSING", "RequestParts", "merged_view",
    # validate
    "FieldError", "check_request", "validate_object", "validate_property",
    # middleware
    "validate_request", "RequestValidator",
    "FriskASGIMiddleware", "FriskWSGIMiddleware",
]
