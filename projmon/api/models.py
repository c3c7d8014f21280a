from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from projmon.core.normalization import Geo, Location, LocationStatus, PrivateLocation


class GeoIn(BaseModel):
    lat: float = 0.0
    lon: float = 0.0


class LocationIn(BaseModel):
    """A public location known to the caller's location registry."""

    id: str
    label: str = ""
    geo: GeoIn = Field(default_factory=GeoIn)
    url: str = ""
    status: LocationStatus = LocationStatus.GA

    def to_location(self) -> Location:
        return Location(
            id=self.id,
            label=self.label,
            geo=Geo(lat=self.geo.lat, lon=self.geo.lon),
            url=self.url,
            status=self.status,
        )


class PrivateLocationIn(BaseModel):
    """A private (agent policy) location known to the caller."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    label: str = ""
    agent_policy_id: str = Field(default="", alias="agentPolicyId")
    concurrent_monitors: int = Field(default=1, alias="concurrentMonitors")

    def to_private_location(self) -> PrivateLocation:
        return PrivateLocation(
            id=self.id,
            label=self.label,
            agent_policy_id=self.agent_policy_id,
            concurrent_monitors=self.concurrent_monitors,
        )


class NormalizeIn(BaseModel):
    """A project-push batch.

    monitors stay untyped: their shape is exactly what normalization checks.
    """

    model_config = ConfigDict(populate_by_name=True)

    monitors: List[Any] = Field(default_factory=list)
    project_id: str = Field(alias="projectId")
    namespace: str = "default"
    version: Optional[str] = None
    locations: List[LocationIn] = Field(default_factory=list)
    private_locations: List[PrivateLocationIn] = Field(
        default_factory=list, alias="privateLocations"
    )


class NormalizationErrorOut(BaseModel):
    id: str
    reason: str
    details: str


class MonitorResultOut(BaseModel):
    """One normalized monitor, parallel to the request's monitors list."""

    errors: List[NormalizationErrorOut] = Field(default_factory=list)
    normalizedFields: Dict[str, Any]
    unsupportedKeys: List[str] = Field(default_factory=list)


class NormalizeOut(BaseModel):
    version: str
    results: List[MonitorResultOut]
    failed_count: int = 0


class SchemaOut(BaseModel):
    """Recognized options for one monitor type at one product version."""

    monitor_type: str
    version: str
    min_version: str
    max_version: Optional[str] = None
    recognized_paths: List[str] = Field(default_factory=list)
    always_present: List[str] = Field(default_factory=list)
