from __future__ import annotations

import copy
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple

from .coercers import (
    DEFAULT_SCHEDULE,
    coerce,
    resolve_locations,
    resolve_private_locations,
    sanitize_namespace,
    synthesize_heartbeat_id,
    to_string_array,
    try_parse_schedule,
)
from .exceptions import NOT_SAVED_NOTICE, InvalidScheduleError, UnsupportedOptionError
from .models import (
    MonitorType,
    NormalizationContext,
    NormalizationError,
    NormalizedMonitorFields,
)
from .schema import COMMON_DEFAULTS, COMMON_OPAQUE, SchemaDefinition, validate_normalized_fields
from .unsupported_keys import flatten_monitor

_TLS_MATERIAL_PATHS = ("ssl.certificate", "ssl.certificate_authorities", "ssl.key")


def monitor_id_of(raw: Any) -> str:
    if isinstance(raw, Mapping) and raw.get("id") is not None:
        return str(raw.get("id"))
    return ""


def build_common_fields(
    flat: Mapping[str, Any], ctx: NormalizationContext
) -> NormalizedMonitorFields:
    """Compute the fields every project monitor carries, whatever its type."""

    monitor_id = monitor_id_of(flat)
    namespace = ctx.namespace or "default"
    locations = [loc.to_dict() for loc in resolve_locations(flat.get("locations"), ctx.locations)]
    locations += [
        loc.to_dict()
        for loc in resolve_private_locations(flat.get("privateLocations"), ctx.private_locations)
    ]

    return {
        "config_id": "",
        "custom_heartbeat_id": synthesize_heartbeat_id(monitor_id, ctx.project_id, namespace),
        "enabled": coerce(flat.get("enabled"), "bool", True),
        "journey_id": monitor_id,
        "locations": locations,
        "name": coerce(flat.get("name"), "string", ""),
        "namespace": sanitize_namespace(namespace),
        "origin": "project",
        "original_space": namespace,
        "project_id": ctx.project_id,
        "service.name": coerce(flat.get("service.name"), "string", ""),
        "tags": to_string_array(flat.get("tags")),
    }


def best_effort_fields(
    raw: Any, ctx: NormalizationContext, schema: Optional[SchemaDefinition] = None
) -> NormalizedMonitorFields:
    """Payload for records whose normalization failed.

    With a schema (the type was resolved) the result carries every field the
    schema always emits, at its default. Without one only the common fields
    are filled and type echoes the declared value.
    """

    opaque = schema.opaque_paths if schema is not None else COMMON_OPAQUE
    flat = flatten_monitor(raw, opaque) if isinstance(raw, Mapping) else {}
    if schema is not None:
        fields = schema.build_defaults()
    else:
        fields = copy.deepcopy(COMMON_DEFAULTS)
        declared = flat.get("type")
        fields["type"] = declared if isinstance(declared, str) else ""
    fields.update(build_common_fields(flat, ctx))
    fields["schedule"] = try_parse_schedule(flat.get("schedule")) or dict(DEFAULT_SCHEDULE)
    return fields


def is_tls_enabled(flat: Mapping[str, Any]) -> bool:
    return any(bool(flat.get(path)) for path in _TLS_MATERIAL_PATHS)


class ProjectMonitorNormalizer:
    """Base class for per-type project monitor normalizers.

    Subclasses set monitor_type and override apply_type_fields. The base
    handles schema-driven coercion, common fields, schedule parsing and the
    single-host rule.
    """

    monitor_type: ClassVar[MonitorType]
    host_field: ClassVar[Optional[str]] = None
    host_noun: ClassVar[str] = "host"
    allow_seconds_schedule: ClassVar[bool] = False

    def normalize(
        self,
        raw: Mapping[str, Any],
        ctx: NormalizationContext,
        schema: SchemaDefinition,
    ) -> Tuple[NormalizedMonitorFields, List[NormalizationError]]:
        """Return (normalized_fields, errors); fields are always complete."""

        flat = flatten_monitor(raw, schema.opaque_paths)
        monitor_id = monitor_id_of(raw)
        errors: List[NormalizationError] = []

        fields = schema.build_defaults()
        for rule in schema.rules:
            if rule.path in flat:
                fields[rule.target] = coerce(flat[rule.path], rule.coercion, rule.default)
        fields.update(build_common_fields(flat, ctx))

        raw_schedule = flat.get("schedule")
        schedule = try_parse_schedule(raw_schedule, allow_seconds=self.allow_seconds_schedule)
        if schedule is None:
            schedule = dict(DEFAULT_SCHEDULE)
            if raw_schedule is not None:
                errors.append(
                    InvalidScheduleError(
                        f"Invalid schedule {raw_schedule!r} for {self.monitor_type.value} "
                        f"project monitors in {ctx.version}. Use a positive number of "
                        'minutes such as 1 or "10m".'
                    ).to_error(monitor_id)
                )
        fields["schedule"] = schedule

        if self.host_field is not None:
            self._apply_single_host(flat, ctx, fields, errors, monitor_id)

        self.apply_type_fields(flat, ctx, fields, errors)
        validate_normalized_fields(fields, schema)
        return fields, errors

    def _apply_single_host(
        self,
        flat: Mapping[str, Any],
        ctx: NormalizationContext,
        fields: Dict[str, Any],
        errors: List[NormalizationError],
        monitor_id: str,
    ) -> None:
        hosts = to_string_array(flat.get(self.host_field))
        if len(hosts) > 1:
            noun = self.host_noun
            errors.append(
                UnsupportedOptionError(
                    f"Multiple {noun}s are not supported for {self.monitor_type.value} project "
                    f"monitors in {ctx.version}. Please set only 1 {noun} per monitor. "
                    + NOT_SAVED_NOTICE
                ).to_error(monitor_id)
            )
        fields[self.host_field] = hosts[0] if hosts else ""

    def apply_type_fields(
        self,
        flat: Mapping[str, Any],
        ctx: NormalizationContext,
        fields: Dict[str, Any],
        errors: List[NormalizationError],
    ) -> None:
        """Hook for type-specific fields; default is a no-op."""
        return None
