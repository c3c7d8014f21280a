from __future__ import annotations

from fastapi.testclient import TestClient

from projmon.api.server import ServiceConfig, create_app

LOCATIONS = [
    {
        "id": "us_central",
        "label": "Test Location",
        "geo": {"lat": 33.333, "lon": 73.333},
        "url": "test-url",
    }
]


def _client(**config) -> TestClient:
    return TestClient(create_app(config=ServiceConfig(**config)))


def test_api_normalize_batch_roundtrip() -> None:
    """API smoke test: one valid and one unknown monitor in a single batch."""

    client = _client()
    r = client.post(
        "/project-monitors/normalize",
        headers={"X-Request-ID": "req-123"},
        json={
            "projectId": "test-project-id",
            "namespace": "test-space",
            "version": "8.5.0",
            "locations": LOCATIONS,
            "privateLocations": [{"id": "germany", "label": "Germany", "agentPolicyId": "p1"}],
            "monitors": [
                {
                    "type": "icmp",
                    "id": "Cloudflare-DNS",
                    "name": "Cloudflare DNS",
                    "hosts": ["1.1.1.1"],
                    "schedule": 1,
                    "locations": ["us_central"],
                    "privateLocations": ["Germany"],
                },
                {"type": "udp", "id": "nope"},
            ],
        },
    )
    assert r.status_code == 200
    # Request correlation header
    assert r.headers.get("x-request-id") == "req-123"

    data = r.json()
    assert data["version"] == "8.5.0"
    assert data["failed_count"] == 1
    assert len(data["results"]) == 2

    icmp = data["results"][0]
    assert icmp["errors"] == []
    assert icmp["unsupportedKeys"] == []
    assert icmp["normalizedFields"]["hosts"] == "1.1.1.1"
    assert icmp["normalizedFields"]["namespace"] == "test_space"
    assert [loc["id"] for loc in icmp["normalizedFields"]["locations"]] == [
        "us_central",
        "germany",
    ]

    unknown = data["results"][1]
    assert unknown["errors"][0]["reason"] == "Unsupported monitor type"
    assert unknown["errors"][0]["id"] == "nope"


def test_api_uses_default_version_when_omitted() -> None:
    client = _client(default_version="8.6.0")
    r = client.post(
        "/project-monitors/normalize",
        json={"projectId": "p", "monitors": [{"type": "tcp", "id": "t", "hosts": "h:1", "hash": "x"}]},
    )
    assert r.status_code == 200
    data = r.json()
    assert data["version"] == "8.6.0"
    assert data["results"][0]["normalizedFields"]["hash"] == "x"
    # A generated request id is echoed when the client sends none.
    assert r.headers.get("x-request-id")


def test_api_rejects_oversized_batch() -> None:
    client = _client(max_monitors=2)
    r = client.post(
        "/project-monitors/normalize",
        json={"projectId": "p", "monitors": [{"type": "icmp", "id": str(i)} for i in range(3)]},
    )
    assert r.status_code == 413
    assert r.json()["detail"] == "too_many_monitors"


def test_api_reports_unsupported_version() -> None:
    client = _client()
    r = client.post(
        "/project-monitors/normalize",
        json={"projectId": "p", "version": "8.4.0", "monitors": [{"type": "icmp", "id": "a"}]},
    )
    assert r.status_code == 422
    assert r.json()["detail"]["error"] == "unsupported_version"

    r2 = client.post(
        "/project-monitors/normalize",
        json={"projectId": "p", "version": "not-a-version", "monitors": []},
    )
    assert r2.status_code == 422


def test_api_requires_project_id() -> None:
    r = _client().post("/project-monitors/normalize", json={"monitors": []})
    assert r.status_code == 422


def test_api_schema_endpoint() -> None:
    client = _client()

    r = client.get("/schemas/http", params={"version": "8.6.0"})
    assert r.status_code == 200
    data = r.json()
    assert data["monitor_type"] == "http"
    assert data["min_version"] == "8.6.0"
    assert data["max_version"] is None
    assert "check.request.method" in data["recognized_paths"]
    assert "__ui" in data["always_present"]

    assert client.get("/schemas/udp").status_code == 404
    r2 = client.get("/schemas/icmp", params={"version": "7.17.0"})
    assert r2.status_code == 422
    assert r2.json()["detail"]["error"] == "unsupported_version"


def test_api_health() -> None:
    r = _client(default_version="8.5.0").get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["ok"] is True
    assert data["default_version"] == "8.5.0"
    assert sorted(data["monitor_types"]) == ["browser", "http", "icmp", "tcp"]


def test_service_config_from_env(monkeypatch) -> None:
    monkeypatch.setenv("PROJMON_MAX_MONITORS", "10")
    monkeypatch.setenv("PROJMON_DEFAULT_VERSION", " 8.5.0 ")
    monkeypatch.setenv("PROJMON_LOG_LEVEL", "debug")

    cfg = ServiceConfig.from_env()
    assert cfg.max_monitors == 10
    assert cfg.default_version == "8.5.0"
    assert cfg.log_level == "DEBUG"

    monkeypatch.setenv("PROJMON_MAX_MONITORS", "lots")
    assert ServiceConfig.from_env().max_monitors == 250
