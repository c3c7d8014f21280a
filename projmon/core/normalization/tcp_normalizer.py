from __future__ import annotations

from typing import Any, Dict, List, Mapping

from .common import ProjectMonitorNormalizer, is_tls_enabled
from .models import MonitorType, NormalizationContext, NormalizationError


class TcpMonitorNormalizer(ProjectMonitorNormalizer):
    """Normalize TCP project monitors.

    The TLS block (ssl.*), proxy settings and check.send / check.receive are
    coerced by schema rules. When no ssl.supported_protocols is given the
    schema default (TLSv1.1 to TLSv1.3) applies; an explicit list is kept as is.
    """

    monitor_type = MonitorType.TCP
    host_field = "hosts"
    allow_seconds_schedule = True

    def apply_type_fields(
        self,
        flat: Mapping[str, Any],
        ctx: NormalizationContext,
        fields: Dict[str, Any],
        errors: List[NormalizationError],
    ) -> None:
        fields["__ui"] = {"is_tls_enabled": is_tls_enabled(flat)}
