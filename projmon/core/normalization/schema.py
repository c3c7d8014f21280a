"""Versioned schema registry for project monitors.

Each monitor type has one or more SchemaDefinitions, each valid for a
half-open product version range ``[min_version, max_version)``. A definition
lists every recognized raw field path, how each one is coerced into the
canonical payload, and the canonical fields that must always be present.

The registry is configuration: it is built once, frozen, and shared.
"""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from .coercers import COERCIONS, DEFAULT_SCHEDULE
from .exceptions import SchemaConfigurationError
from .models import MonitorType, NormalizedMonitorFields

Version = Tuple[int, int, int]

_VERSION_RE = re.compile(r"^v?(\d+)\.(\d+)(?:\.(\d+))?(?:[-+].*)?$")


def parse_version(raw: str) -> Version:
    """Parse "major.minor[.patch]" (pre-release/build suffix ignored).

    Raises SchemaConfigurationError for anything else; the product version is
    server configuration, not monitor input.
    """

    m = _VERSION_RE.match(str(raw).strip()) if raw is not None else None
    if m is None:
        raise SchemaConfigurationError(f"Invalid product version: {raw!r}")
    return int(m.group(1)), int(m.group(2)), int(m.group(3) or 0)


@dataclass(frozen=True)
class FieldRule:
    """How one raw field path maps into the canonical payload."""

    path: str
    target: str
    default: Any = ""
    coercion: str = "string"


@dataclass(frozen=True)
class SchemaDefinition:
    """Recognized fields and defaults for one monitor type and version range."""

    monitor_type: MonitorType
    min_version: str
    max_version: Optional[str]
    rules: Tuple[FieldRule, ...]
    defaults: Mapping[str, Any]
    handled_paths: FrozenSet[str] = frozenset()
    opaque_paths: FrozenSet[str] = frozenset()

    @property
    def recognized_paths(self) -> FrozenSet[str]:
        return self.handled_paths | frozenset(r.path for r in self.rules)

    @property
    def always_present(self) -> Tuple[str, ...]:
        return tuple(self.defaults.keys())

    def contains(self, version: Version) -> bool:
        if version < parse_version(self.min_version):
            return False
        return self.max_version is None or version < parse_version(self.max_version)

    def build_defaults(self) -> NormalizedMonitorFields:
        """Return a fresh, fully-defaulted canonical payload."""
        return copy.deepcopy(dict(self.defaults))


def validate_normalized_fields(fields: Mapping[str, Any], schema: SchemaDefinition) -> None:
    """Validate that a normalized payload carries every always-present field.

    This is a *shape validator* (not a semantic validator).
    """

    if not isinstance(fields, Mapping):
        raise ValueError("normalized fields must be a mapping")
    for key in schema.always_present:
        if key not in fields:
            raise ValueError(f"normalized fields missing: {key}")
    schedule = fields.get("schedule")
    if not isinstance(schedule, Mapping) or set(schedule) != {"number", "unit"}:
        raise ValueError("normalized schedule must be {number, unit}")


@dataclass
class SchemaRegistry:
    """In-memory registry of versioned schema definitions.

    - register: O(k) for k definitions already registered for the type
    - schema_for: O(k)
    """

    _entries: Dict[MonitorType, List[SchemaDefinition]] = field(
        default_factory=dict, init=False, repr=False
    )
    _frozen: bool = field(default=False, init=False, repr=False)

    def register(self, definition: SchemaDefinition) -> None:
        """Register a definition; overlapping ranges for a type are rejected."""
        if self._frozen:
            raise SchemaConfigurationError("Schema registry is frozen")

        for rule in definition.rules:
            if rule.coercion not in COERCIONS:
                raise SchemaConfigurationError(
                    f"Unknown coercion {rule.coercion!r} for field {rule.path!r}"
                )

        lo = parse_version(definition.min_version)
        hi = parse_version(definition.max_version) if definition.max_version else None
        if hi is not None and hi <= lo:
            raise SchemaConfigurationError(
                f"Empty version range for {definition.monitor_type.value}: "
                f"[{definition.min_version}, {definition.max_version})"
            )

        existing = self._entries.setdefault(definition.monitor_type, [])
        for other in existing:
            o_lo = parse_version(other.min_version)
            o_hi = parse_version(other.max_version) if other.max_version else None
            if (hi is None or o_lo < hi) and (o_hi is None or lo < o_hi):
                raise SchemaConfigurationError(
                    f"Overlapping schema ranges for {definition.monitor_type.value}"
                )
        existing.append(definition)
        existing.sort(key=lambda d: parse_version(d.min_version))

    def freeze(self) -> "SchemaRegistry":
        self._frozen = True
        return self

    def schema_for(self, monitor_type: MonitorType, version: str) -> SchemaDefinition:
        """Return the definition whose range contains version.

        Raises SchemaConfigurationError when none does.
        """

        v = parse_version(version)
        for definition in self._entries.get(monitor_type, []):
            if definition.contains(v):
                return definition
        raise SchemaConfigurationError(
            f"No schema registered for {monitor_type.value} project monitors in {version}"
        )

    def monitor_types(self) -> List[MonitorType]:
        return list(self._entries.keys())

    def definitions(self, monitor_type: MonitorType) -> List[SchemaDefinition]:
        return list(self._entries.get(monitor_type, []))


# ------------------------------
# Built-in schema tables
# ------------------------------

DEFAULT_TIMEOUT_SECONDS = "16"
DEFAULT_WAIT_SECONDS = "1"
DEFAULT_TLS_PROTOCOLS = ["TLSv1.1", "TLSv1.2", "TLSv1.3"]
DEFAULT_THROTTLING = {"download": "5", "upload": "3", "latency": "20"}

# Mapping-valued options every type treats as a single value.
COMMON_OPAQUE = frozenset({"schedule"})

COMMON_HANDLED = frozenset(
    {
        "id",
        "name",
        "type",
        "schedule",
        "tags",
        "locations",
        "privateLocations",
        "enabled",
        "service.name",
    }
)

COMMON_DEFAULTS: Dict[str, Any] = {
    "config_id": "",
    "custom_heartbeat_id": "",
    "enabled": True,
    "form_monitor_type": "",
    "journey_id": "",
    "locations": [],
    "name": "",
    "namespace": "default",
    "origin": "project",
    "original_space": "default",
    "project_id": "",
    "schedule": dict(DEFAULT_SCHEDULE),
    "service.name": "",
    "tags": [],
    "type": "",
}

_TLS_RULES: Tuple[FieldRule, ...] = (
    FieldRule("ssl.certificate_authorities", "ssl.certificate_authorities"),
    FieldRule("ssl.certificate", "ssl.certificate"),
    FieldRule("ssl.key", "ssl.key"),
    FieldRule("ssl.key_passphrase", "ssl.key_passphrase"),
    FieldRule("ssl.verification_mode", "ssl.verification_mode", "full"),
    FieldRule(
        "ssl.supported_protocols",
        "ssl.supported_protocols",
        DEFAULT_TLS_PROTOCOLS,
        "string_array",
    ),
)


def _defaults_for(rules: Iterable[FieldRule], **extra: Any) -> Dict[str, Any]:
    out = dict(COMMON_DEFAULTS)
    for rule in rules:
        out[rule.target] = rule.default
    out.update(extra)
    return out


def _icmp(min_version: str, max_version: Optional[str], extra: Tuple[FieldRule, ...]) -> SchemaDefinition:
    rules = (
        FieldRule("timeout", "timeout", DEFAULT_TIMEOUT_SECONDS, "duration"),
        FieldRule("wait", "wait", DEFAULT_WAIT_SECONDS, "duration"),
    ) + extra
    return SchemaDefinition(
        monitor_type=MonitorType.ICMP,
        min_version=min_version,
        max_version=max_version,
        rules=rules,
        defaults=_defaults_for(rules, hosts="", form_monitor_type="icmp", type="icmp"),
        handled_paths=COMMON_HANDLED | {"hosts"},
        opaque_paths=COMMON_OPAQUE | {"params"},
    )


def _tcp(min_version: str, max_version: Optional[str], extra: Tuple[FieldRule, ...]) -> SchemaDefinition:
    rules = (
        (FieldRule("timeout", "timeout", DEFAULT_TIMEOUT_SECONDS, "duration"),)
        + _TLS_RULES
        + (
            FieldRule("proxy_url", "proxy_url"),
            FieldRule("proxy_use_local_resolver", "proxy_use_local_resolver", False, "bool"),
            FieldRule("check.send", "check.send"),
            FieldRule("check.receive", "check.receive"),
        )
        + extra
    )
    return SchemaDefinition(
        monitor_type=MonitorType.TCP,
        min_version=min_version,
        max_version=max_version,
        rules=rules,
        defaults=_defaults_for(
            rules,
            hosts="",
            form_monitor_type="tcp",
            type="tcp",
            **{"url.port": None, "__ui": {"is_tls_enabled": False}},
        ),
        handled_paths=COMMON_HANDLED | {"hosts"},
        opaque_paths=COMMON_OPAQUE | {"params"},
    )


def _http(min_version: str, max_version: Optional[str], extra: Tuple[FieldRule, ...]) -> SchemaDefinition:
    rules = (
        (
            FieldRule("timeout", "timeout", DEFAULT_TIMEOUT_SECONDS, "duration"),
            FieldRule("max_redirects", "max_redirects", "0", "number_string"),
            FieldRule("check.request.method", "check.request.method", "GET"),
            FieldRule("check.request.headers", "check.request.headers", {}, "mapping"),
            FieldRule(
                "check.request.body",
                "check.request.body",
                {"type": "text", "value": ""},
                "request_body",
            ),
            FieldRule("check.response.status", "check.response.status", [], "string_array"),
            FieldRule("check.response.headers", "check.response.headers", {}, "mapping"),
            FieldRule(
                "check.response.body.positive",
                "check.response.body.positive",
                [],
                "string_array",
            ),
            FieldRule(
                "check.response.body.negative",
                "check.response.body.negative",
                [],
                "string_array",
            ),
            FieldRule("response.include_body", "response.include_body", "on_error"),
            FieldRule("response.include_headers", "response.include_headers", True, "bool"),
            FieldRule("username", "username"),
            FieldRule("password", "password"),
            FieldRule("proxy_url", "proxy_url"),
        )
        + _TLS_RULES
        + extra
    )
    return SchemaDefinition(
        monitor_type=MonitorType.HTTP,
        min_version=min_version,
        max_version=max_version,
        rules=rules,
        defaults=_defaults_for(
            rules,
            urls="",
            form_monitor_type="http",
            type="http",
            **{"__ui": {"is_tls_enabled": False}},
        ),
        handled_paths=COMMON_HANDLED | {"urls"},
        opaque_paths=COMMON_OPAQUE
        | {"check.request.headers", "check.request.body", "check.response.headers", "params"},
    )


def _browser(min_version: str, max_version: Optional[str], extra: Tuple[FieldRule, ...]) -> SchemaDefinition:
    rules = (
        FieldRule("content", "source.project.content"),
        FieldRule("screenshot", "screenshots", "on"),
        FieldRule("playwrightOptions", "playwright_options", "", "json_string"),
        FieldRule("params", "params", "", "json_string"),
        FieldRule("filter.match", "filter_journeys.match"),
        FieldRule("ignoreHTTPSErrors", "ignore_https_errors", False, "bool"),
        FieldRule("synthetics_args", "synthetics_args", [], "string_array"),
    ) + extra
    return SchemaDefinition(
        monitor_type=MonitorType.BROWSER,
        min_version=min_version,
        max_version=max_version,
        rules=rules,
        defaults=_defaults_for(
            rules,
            form_monitor_type="multistep",
            type="browser",
            timeout=None,
            **{
                "throttling.is_enabled": True,
                "throttling.download_speed": DEFAULT_THROTTLING["download"],
                "throttling.upload_speed": DEFAULT_THROTTLING["upload"],
                "throttling.latency": DEFAULT_THROTTLING["latency"],
                "throttling.config": "5d/3u/20l",
            },
        ),
        handled_paths=COMMON_HANDLED
        | {"throttling", "throttling.download", "throttling.upload", "throttling.latency"},
        opaque_paths=COMMON_OPAQUE | {"playwrightOptions", "params"},
    )


# 8.6.0 added the project hash to every type and params to lightweight types.
_HASH_RULE = FieldRule("hash", "hash")
_PARAMS_RULE = FieldRule("params", "params", "", "json_string")


def build_default_registry() -> SchemaRegistry:
    """Build the registry with every shipped schema definition."""

    registry = SchemaRegistry()
    for factory in (_icmp, _tcp, _http):
        registry.register(factory("8.5.0", "8.6.0", ()))
        registry.register(factory("8.6.0", None, (_HASH_RULE, _PARAMS_RULE)))
    registry.register(_browser("8.5.0", "8.6.0", ()))
    registry.register(_browser("8.6.0", None, (_HASH_RULE,)))
    return registry.freeze()


_DEFAULT_REGISTRY: Optional[SchemaRegistry] = None


def default_registry() -> SchemaRegistry:
    """Return the process-wide registry, building it on first use."""

    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = build_default_registry()
    return _DEFAULT_REGISTRY
