"""Shared field coercers for project monitor normalization.

Every function here is pure and total over its input domain: malformed
values fall back to a default instead of raising. Callers that need to
report bad input use the ``try_*`` variants and decide on an error.

Security notes:
- Raw monitor values are caller supplied and may be any JSON shape.
- Defaults are deep-copied so normalized payloads never share list/dict
  instances with the schema tables.
"""

from __future__ import annotations

import copy
import json
import math
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .models import Location, PrivateLocation

DEFAULT_SCHEDULE: Dict[str, str] = {"number": "3", "unit": "m"}

_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600}
_DURATION_RE = re.compile(r"^(\d+)\s*([smh]?)$", re.IGNORECASE)


def _seconds_from(raw: Any, *, bare_unit: str) -> Optional[int]:
    """Return whole seconds for an int or shorthand string, else None.

    bare_unit is the unit applied to plain numbers ("s" for durations,
    "m" for schedules).
    """

    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw * _UNIT_SECONDS[bare_unit]
    if isinstance(raw, float):
        if not math.isfinite(raw) or raw != int(raw):
            return None
        return int(raw) * _UNIT_SECONDS[bare_unit]
    if not isinstance(raw, str):
        return None

    text = raw.strip()
    if text.startswith("@every"):
        text = text[len("@every") :].strip()
    m = _DURATION_RE.match(text)
    if m is None:
        return None
    unit = m.group(2).lower() or bare_unit
    return int(m.group(1)) * _UNIT_SECONDS[unit]


def try_parse_schedule(raw: Any, *, allow_seconds: bool = False) -> Optional[Dict[str, str]]:
    """Parse a schedule into {"number", "unit"}; None when unparseable.

    Plain integers are minutes. An already-normalized {"number", "unit"}
    object is accepted too. With allow_seconds, a schedule that is not a
    whole number of minutes keeps unit "s"; otherwise it rounds up to minutes.
    """

    if isinstance(raw, Mapping):
        unit = str(raw.get("unit", "m")).strip().lower()
        if unit not in _UNIT_SECONDS or not unit:
            return None
        seconds = _seconds_from(raw.get("number"), bare_unit=unit)
    else:
        seconds = _seconds_from(raw, bare_unit="m")
    if seconds is None or seconds <= 0:
        return None
    if allow_seconds and seconds % 60 != 0:
        return {"number": str(seconds), "unit": "s"}
    return {"number": str(math.ceil(seconds / 60)), "unit": "m"}


def parse_schedule(raw: Any, *, allow_seconds: bool = False) -> Dict[str, str]:
    parsed = try_parse_schedule(raw, allow_seconds=allow_seconds)
    return parsed if parsed is not None else dict(DEFAULT_SCHEDULE)


def parse_duration(raw: Any, default_seconds: Optional[int]) -> Optional[str]:
    """Convert "1m" / "30s" / 16 into whole seconds as a decimal string.

    Absent or unparseable input yields the type-specific default (which may
    be None for types without the field).
    """

    seconds = _seconds_from(raw, bare_unit="s")
    if seconds is None or seconds < 0:
        return None if default_seconds is None else str(default_seconds)
    return str(seconds)


def to_string_array(raw: Any) -> List[str]:
    """Normalize a list or comma-delimited string into a list of strings."""

    if raw is None:
        return []
    if isinstance(raw, str):
        return [part.strip() for part in raw.split(",") if part.strip()]
    if isinstance(raw, (list, tuple)):
        return [str(item) for item in raw if item is not None]
    return [str(raw)]


def sanitize_namespace(raw: str) -> str:
    return raw.replace("-", "_")


def synthesize_heartbeat_id(monitor_id: str, project_id: str, namespace: str) -> str:
    """Build the stable heartbeat id.

    The namespace is used as supplied (unsanitized); existing ids depend on it.
    """

    return f"{monitor_id}-{project_id}-{namespace}"


def resolve_locations(raw_ids: Any, known: Sequence[Location]) -> List[Location]:
    """Return known public locations whose id was requested, in known order.

    Unknown ids are dropped without an error.
    """

    wanted = set(to_string_array(raw_ids))
    return [loc for loc in known if loc.id in wanted]


def resolve_private_locations(
    raw_refs: Any, known: Sequence[PrivateLocation]
) -> List[PrivateLocation]:
    """Return known private locations referenced by label or id, in known order."""

    wanted = set(to_string_array(raw_refs))
    return [loc for loc in known if loc.label in wanted or loc.id in wanted]


# ------------------------------
# Schema-driven field coercion
# ------------------------------


def _as_string(value: Any, default: Any) -> Any:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return default


def _as_number_string(value: Any, default: Any) -> Any:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and math.isfinite(value) and value == int(value):
        return str(int(value))
    if isinstance(value, str) and value.strip().isdigit():
        return value.strip()
    return default


def _as_bool(value: Any, default: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
        return value.strip().lower() == "true"
    return default


def _as_mapping(value: Any, default: Any) -> Any:
    if isinstance(value, Mapping):
        return copy.deepcopy(dict(value))
    return default


def _as_json_string(value: Any, default: Any) -> Any:
    if isinstance(value, Mapping):
        return json.dumps(value) if value else default
    if isinstance(value, str):
        return value
    return default


def _as_request_body(value: Any, default: Any) -> Any:
    if isinstance(value, Mapping):
        return {"type": "json", "value": json.dumps(value)}
    if isinstance(value, str):
        return {"type": "text", "value": value}
    return default


def _as_duration(value: Any, default: Any) -> Any:
    if default is None:
        return parse_duration(value, None)
    return parse_duration(value, int(default))


def _as_string_array(value: Any, default: Any) -> Any:
    if value is None:
        return default
    return to_string_array(value)


COERCIONS: Dict[str, Callable[[Any, Any], Any]] = {
    "string": _as_string,
    "number_string": _as_number_string,
    "bool": _as_bool,
    "string_array": _as_string_array,
    "duration": _as_duration,
    "mapping": _as_mapping,
    "json_string": _as_json_string,
    "request_body": _as_request_body,
}


def coerce(value: Any, coercion: str, default: Any) -> Any:
    """Coerce a raw value with a registered coercion id.

    The fallback default is deep-copied before it is returned.
    """

    fn = COERCIONS[coercion]
    out = fn(value, default)
    if out is default:
        return copy.deepcopy(default)
    return out
