from __future__ import annotations

from typing import Any, Dict, List, Mapping

from .coercers import coerce
from .common import ProjectMonitorNormalizer
from .models import MonitorType, NormalizationContext, NormalizationError
from .schema import DEFAULT_THROTTLING


class BrowserMonitorNormalizer(ProjectMonitorNormalizer):
    """Normalize browser (multistep journey) project monitors.

    Expected raw fields beyond the common ones:
    - content: the bundled journey source
    - throttling: false, or {download, upload, latency}
    - playwrightOptions / params: objects, stored as JSON strings
    - screenshot, filter.match, ignoreHTTPSErrors

    Browser schedules are whole minutes and there is no timeout.
    """

    monitor_type = MonitorType.BROWSER

    def apply_type_fields(
        self,
        flat: Mapping[str, Any],
        ctx: NormalizationContext,
        fields: Dict[str, Any],
        errors: List[NormalizationError],
    ) -> None:
        enabled = coerce(flat.get("throttling"), "bool", True)
        download = coerce(flat.get("throttling.download"), "string", DEFAULT_THROTTLING["download"])
        upload = coerce(flat.get("throttling.upload"), "string", DEFAULT_THROTTLING["upload"])
        latency = coerce(flat.get("throttling.latency"), "string", DEFAULT_THROTTLING["latency"])

        fields["throttling.is_enabled"] = enabled
        fields["throttling.download_speed"] = download
        fields["throttling.upload_speed"] = upload
        fields["throttling.latency"] = latency
        fields["throttling.config"] = f"{download}d/{upload}u/{latency}l"
