from __future__ import annotations

from .common import ProjectMonitorNormalizer
from .models import MonitorType


class IcmpMonitorNormalizer(ProjectMonitorNormalizer):
    """Normalize ICMP (ping) project monitors.

    Expected raw fields beyond the common ones:
    - hosts: one host, as a string or single-element list
    - timeout / wait: durations such as "1m" or "30s"

    Timeout and wait are coerced by the schema rules; the only
    ICMP-specific handling is the single-host rule in the base class.
    """

    monitor_type = MonitorType.ICMP
    host_field = "hosts"
    allow_seconds_schedule = True
