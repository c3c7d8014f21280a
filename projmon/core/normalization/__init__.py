"""Project monitor normalization for projmon.

Normalization maps loosely-typed project-push monitor definitions into the
canonical, fully-defaulted field layout used by persistence and execution,
and reports recoverable errors and unrecognized options per monitor.

Security notes:
- Never assume monitor definitions are well-formed or benign.
- Keep transforms deterministic and free of I/O.
"""

from .coercers import (
    parse_duration,
    parse_schedule,
    resolve_locations,
    resolve_private_locations,
    sanitize_namespace,
    synthesize_heartbeat_id,
    to_string_array,
    try_parse_schedule,
)
from .exceptions import (
    NormalizationFailure,
    SchemaConfigurationError,
    UnknownMonitorTypeError,
    UnsupportedOptionError,
)
from .models import (
    Geo,
    Location,
    LocationStatus,
    MonitorType,
    NormalizationContext,
    NormalizationError,
    NormalizedMonitorResult,
    PrivateLocation,
)
from .normalizer import (
    NormalizationDispatch,
    normalize_project_monitor,
    normalize_project_monitors,
    select_normalizer,
    supported_monitor_types,
)
from .schema import (
    FieldRule,
    SchemaDefinition,
    SchemaRegistry,
    build_default_registry,
    default_registry,
    parse_version,
    validate_normalized_fields,
)
from .unsupported_keys import detect_unsupported_keys, flatten_monitor

__all__ = [
    "MonitorType",
    "Geo",
    "Location",
    "LocationStatus",
    "PrivateLocation",
    "NormalizationContext",
    "NormalizationError",
    "NormalizedMonitorResult",
    "NormalizationFailure",
    "UnsupportedOptionError",
    "UnknownMonitorTypeError",
    "SchemaConfigurationError",
    "FieldRule",
    "SchemaDefinition",
    "SchemaRegistry",
    "build_default_registry",
    "default_registry",
    "parse_version",
    "validate_normalized_fields",
    "parse_schedule",
    "try_parse_schedule",
    "parse_duration",
    "to_string_array",
    "sanitize_namespace",
    "synthesize_heartbeat_id",
    "resolve_locations",
    "resolve_private_locations",
    "flatten_monitor",
    "detect_unsupported_keys",
    "NormalizationDispatch",
    "select_normalizer",
    "supported_monitor_types",
    "normalize_project_monitor",
    "normalize_project_monitors",
]
