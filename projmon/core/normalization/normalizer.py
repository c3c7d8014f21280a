from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .browser_normalizer import BrowserMonitorNormalizer
from .common import ProjectMonitorNormalizer, best_effort_fields, monitor_id_of
from .exceptions import (
    NOT_SAVED_NOTICE,
    NormalizationFailure,
    SchemaConfigurationError,
    UnknownMonitorTypeError,
)
from .http_normalizer import HttpMonitorNormalizer
from .icmp_normalizer import IcmpMonitorNormalizer
from .models import MonitorType, NormalizationContext, NormalizedMonitorResult
from .schema import SchemaDefinition, SchemaRegistry, default_registry, parse_version
from .tcp_normalizer import TcpMonitorNormalizer
from .unsupported_keys import detect_unsupported_keys, unsupported_keys_error

log = logging.getLogger("projmon.normalization")

_NORMALIZERS: Dict[MonitorType, ProjectMonitorNormalizer] = {
    MonitorType.ICMP: IcmpMonitorNormalizer(),
    MonitorType.TCP: TcpMonitorNormalizer(),
    MonitorType.HTTP: HttpMonitorNormalizer(),
    MonitorType.BROWSER: BrowserMonitorNormalizer(),
}


@dataclass(frozen=True)
class NormalizationDispatch:
    """Outcome of selecting a normalizer for one raw monitor."""

    monitor_type: MonitorType
    normalizer: ProjectMonitorNormalizer
    schema: SchemaDefinition


def supported_monitor_types(registry: Optional[SchemaRegistry] = None) -> List[MonitorType]:
    """Types that have both a normalizer and at least one schema definition."""

    registry = registry or default_registry()
    return [t for t in registry.monitor_types() if t in _NORMALIZERS]


def select_normalizer(
    raw: Any,
    version: str,
    *,
    registry: Optional[SchemaRegistry] = None,
    schema_cache: Optional[Dict[MonitorType, SchemaDefinition]] = None,
) -> NormalizationDispatch:
    """Select the normalizer and schema for a raw monitor.

    Raises UnknownMonitorTypeError for a missing/unknown declared type and
    SchemaConfigurationError when a known type has no schema for version.
    """

    registry = registry or default_registry()
    if not isinstance(raw, Mapping):
        raise UnknownMonitorTypeError(
            f"Project monitors must be objects, got {type(raw).__name__}. {NOT_SAVED_NOTICE}"
        )

    declared = raw.get("type")
    monitor_type = MonitorType.parse(declared)
    if monitor_type is None or monitor_type not in _NORMALIZERS:
        supported = "|".join(sorted(t.value for t in supported_monitor_types(registry)))
        raise UnknownMonitorTypeError(
            f"Monitor type {declared!r} is not supported for project monitors in {version}. "
            f"Supported types are: {supported}. {NOT_SAVED_NOTICE}"
        )

    if schema_cache is not None and monitor_type in schema_cache:
        schema = schema_cache[monitor_type]
    else:
        schema = registry.schema_for(monitor_type, version)
        if schema_cache is not None:
            schema_cache[monitor_type] = schema

    return NormalizationDispatch(
        monitor_type=monitor_type, normalizer=_NORMALIZERS[monitor_type], schema=schema
    )


def normalize_project_monitor(
    raw: Any,
    ctx: NormalizationContext,
    *,
    registry: Optional[SchemaRegistry] = None,
    schema_cache: Optional[Dict[MonitorType, SchemaDefinition]] = None,
) -> NormalizedMonitorResult:
    """Normalize one raw monitor; per-record failures become errors.

    Only SchemaConfigurationError propagates.
    """

    monitor_id = monitor_id_of(raw)
    try:
        dispatch = select_normalizer(
            raw, ctx.version, registry=registry, schema_cache=schema_cache
        )
    except NormalizationFailure as exc:
        log.debug(
            "project_monitor_rejected",
            extra={"monitor_id": monitor_id, "reason": exc.reason},
        )
        return NormalizedMonitorResult(
            normalized_fields=best_effort_fields(raw, ctx),
            errors=[exc.to_error(monitor_id)],
        )

    log_extra = {"monitor_id": monitor_id, "monitor_type": dispatch.monitor_type.value}
    try:
        fields, errors = dispatch.normalizer.normalize(raw, ctx, dispatch.schema)
    except SchemaConfigurationError:
        raise
    except Exception as exc:
        # A bug in one record's handling must not abort its siblings.
        log.warning("project_monitor_normalization_failed", exc_info=True, extra=log_extra)
        failure = NormalizationFailure(
            f"Unable to normalize {dispatch.monitor_type.value} project monitor: {exc}"
        )
        fields = best_effort_fields(raw, ctx, dispatch.schema)
        errors = [failure.to_error(monitor_id)]

    try:
        unsupported = detect_unsupported_keys(raw, dispatch.schema)
    except Exception as exc:
        log.warning("project_monitor_key_scan_failed", exc_info=True, extra=log_extra)
        unsupported = []
        errors.append(
            NormalizationFailure(
                f"Unable to check options of {dispatch.monitor_type.value} project monitor: {exc}"
            ).to_error(monitor_id)
        )

    if unsupported:
        errors.append(
            unsupported_keys_error(
                unsupported, monitor_type=dispatch.monitor_type.value, version=ctx.version
            ).to_error(monitor_id)
        )

    log.debug(
        "project_monitor_normalized",
        extra={
            "monitor_id": monitor_id,
            "monitor_type": dispatch.monitor_type.value,
            "error_count": len(errors),
            "unsupported_key_count": len(unsupported),
        },
    )
    return NormalizedMonitorResult(
        normalized_fields=fields, errors=errors, unsupported_keys=unsupported
    )


def normalize_project_monitors(
    monitors: Iterable[Any],
    ctx: NormalizationContext,
    *,
    registry: Optional[SchemaRegistry] = None,
) -> List[NormalizedMonitorResult]:
    """Normalize a project-push batch.

    Returns exactly one result per input record, in input order. Schemas are
    resolved once per monitor type for the whole call.

    Raises SchemaConfigurationError when ctx.version is invalid or a known
    type has no schema for it; nothing else escapes.
    """

    registry = registry or default_registry()
    parse_version(ctx.version)

    schema_cache: Dict[MonitorType, SchemaDefinition] = {}
    return [
        normalize_project_monitor(raw, ctx, registry=registry, schema_cache=schema_cache)
        for raw in monitors
    ]
