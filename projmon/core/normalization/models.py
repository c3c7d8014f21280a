from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

# Canonical normalized payload: dotted field name -> wire value.
NormalizedMonitorFields = Dict[str, Any]


class MonitorType(str, Enum):
    """Check protocol a project monitor performs."""

    ICMP = "icmp"
    TCP = "tcp"
    HTTP = "http"
    BROWSER = "browser"

    @classmethod
    def parse(cls, raw: Any) -> Optional["MonitorType"]:
        """Return the MonitorType for a declared type value, or None."""
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


class LocationStatus(str, Enum):
    GA = "ga"
    BETA = "beta"
    EXPERIMENTAL = "experimental"


@dataclass(frozen=True)
class Geo:
    lat: float
    lon: float


@dataclass(frozen=True)
class Location:
    """A public, service-managed check location."""

    id: str
    label: str
    geo: Geo
    url: str
    status: LocationStatus = LocationStatus.GA
    is_service_managed: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "geo": {"lat": self.geo.lat, "lon": self.geo.lon},
            "url": self.url,
            "isServiceManaged": self.is_service_managed,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Location":
        geo = data.get("geo") if isinstance(data.get("geo"), Mapping) else {}
        return cls(
            id=str(data["id"]),
            label=str(data.get("label", "")),
            geo=Geo(lat=float(geo.get("lat", 0.0)), lon=float(geo.get("lon", 0.0))),
            url=str(data.get("url", "")),
            status=LocationStatus(str(data.get("status", LocationStatus.GA.value))),
        )


@dataclass(frozen=True)
class PrivateLocation:
    """A customer-operated location backed by an agent policy."""

    id: str
    label: str
    agent_policy_id: str
    concurrent_monitors: int = 1
    is_service_managed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "isServiceManaged": self.is_service_managed,
            "concurrentMonitors": self.concurrent_monitors,
            "agentPolicyId": self.agent_policy_id,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PrivateLocation":
        return cls(
            id=str(data["id"]),
            label=str(data.get("label", "")),
            agent_policy_id=str(data.get("agentPolicyId", data.get("agent_policy_id", ""))),
            concurrent_monitors=int(
                data.get("concurrentMonitors", data.get("concurrent_monitors", 1))
            ),
        )


@dataclass(frozen=True)
class NormalizationContext:
    """Per-batch, read-only inputs shared by every record.

    Locations are passed explicitly so normalizers never read registries from
    ambient state.
    """

    project_id: str
    namespace: str
    version: str
    locations: Tuple[Location, ...] = ()
    private_locations: Tuple[PrivateLocation, ...] = ()

    def __post_init__(self) -> None:
        # Accept lists from callers but store immutable tuples.
        object.__setattr__(self, "locations", tuple(self.locations))
        object.__setattr__(self, "private_locations", tuple(self.private_locations))


@dataclass(frozen=True)
class NormalizationError:
    """A recoverable, record-scoped normalization problem."""

    id: str
    reason: str
    details: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "reason": self.reason, "details": self.details}


@dataclass(frozen=True)
class NormalizedMonitorResult:
    """Outcome for one raw monitor, parallel to the input batch."""

    normalized_fields: NormalizedMonitorFields
    errors: List[NormalizationError] = field(default_factory=list)
    unsupported_keys: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "errors": [e.to_dict() for e in self.errors],
            "normalizedFields": self.normalized_fields,
            "unsupportedKeys": list(self.unsupported_keys),
        }
