from __future__ import annotations

from typing import Any, Dict, List, Mapping

from .common import ProjectMonitorNormalizer, is_tls_enabled
from .models import MonitorType, NormalizationContext, NormalizationError


class HttpMonitorNormalizer(ProjectMonitorNormalizer):
    """Normalize HTTP project monitors.

    Only one url is allowed per monitor. Request/response checks, auth,
    proxy and TLS settings are coerced by schema rules; header and body
    mappings are treated as opaque values, not as nested option paths.
    """

    monitor_type = MonitorType.HTTP
    host_field = "urls"
    host_noun = "url"
    allow_seconds_schedule = True

    def apply_type_fields(
        self,
        flat: Mapping[str, Any],
        ctx: NormalizationContext,
        fields: Dict[str, Any],
        errors: List[NormalizationError],
    ) -> None:
        fields["__ui"] = {"is_tls_enabled": is_tls_enabled(flat)}
        # Upper-case methods so "get" and "GET" normalize identically.
        method = fields.get("check.request.method")
        if isinstance(method, str) and method:
            fields["check.request.method"] = method.upper()
