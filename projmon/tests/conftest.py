from __future__ import annotations

from typing import Any, Dict, List

import pytest

from projmon.core.normalization import (
    Geo,
    Location,
    LocationStatus,
    NormalizationContext,
    PrivateLocation,
)

PROJECT_ID = "test-project-id"


def _public(location_id: str) -> Location:
    return Location(
        id=location_id,
        label="Test Location",
        geo=Geo(lat=33.333, lon=73.333),
        url="test-url",
        status=LocationStatus.GA,
    )


@pytest.fixture
def locations() -> List[Location]:
    return [_public("us_central"), _public("us_east")]


@pytest.fixture
def private_locations() -> List[PrivateLocation]:
    return [
        PrivateLocation(
            id="germany", label="Germany", agent_policy_id="germany", concurrent_monitors=1
        )
    ]


@pytest.fixture
def make_ctx(locations, private_locations):
    def _make(version: str = "8.5.0", namespace: str = "test-space") -> NormalizationContext:
        return NormalizationContext(
            project_id=PROJECT_ID,
            namespace=namespace,
            version=version,
            locations=locations,
            private_locations=private_locations,
        )

    return _make


@pytest.fixture
def us_central() -> Dict[str, Any]:
    """Wire shape of the resolved us_central location."""
    return {
        "geo": {"lat": 33.333, "lon": 73.333},
        "id": "us_central",
        "isServiceManaged": True,
        "label": "Test Location",
        "status": "ga",
        "url": "test-url",
    }
