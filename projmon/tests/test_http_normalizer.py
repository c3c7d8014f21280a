from __future__ import annotations

from projmon.core.normalization import default_registry, normalize_project_monitors
from projmon.core.normalization.models import MonitorType


def _http_monitor(**overrides):
    monitor = {
        "type": "http",
        "id": "my-http",
        "name": "My HTTP",
        "urls": "https://example.com/health",
        "schedule": "10m",
        "locations": ["us_east"],
    }
    monitor.update(overrides)
    return monitor


def test_http_defaults_are_fully_populated(make_ctx) -> None:
    (result,) = normalize_project_monitors([_http_monitor()], make_ctx("8.5.0"))
    fields = result.normalized_fields
    schema = default_registry().schema_for(MonitorType.HTTP, "8.5.0")

    assert result.errors == []
    assert set(fields) == set(schema.always_present)
    assert fields["urls"] == "https://example.com/health"
    assert fields["schedule"] == {"number": "10", "unit": "m"}
    assert fields["max_redirects"] == "0"
    assert fields["check.request.method"] == "GET"
    assert fields["check.request.headers"] == {}
    assert fields["check.request.body"] == {"type": "text", "value": ""}
    assert fields["check.response.status"] == []
    assert fields["response.include_body"] == "on_error"
    assert fields["response.include_headers"] is True
    assert fields["ssl.supported_protocols"] == ["TLSv1.1", "TLSv1.2", "TLSv1.3"]
    assert fields["timeout"] == "16"
    assert [loc["id"] for loc in fields["locations"]] == ["us_east"]


def test_http_request_and_response_checks_are_coerced(make_ctx) -> None:
    monitor = _http_monitor(
        max_redirects=3,
        timeout="30s",
        check={
            "request": {
                "method": "post",
                "headers": {"X-Api-Key": "secret"},
                "body": {"q": 1},
            },
            "response": {"status": [200, 201], "body": {"positive": "ok"}},
        },
        ssl={"certificate_authorities": "CA"},
    )
    (result,) = normalize_project_monitors([monitor], make_ctx("8.5.0"))
    fields = result.normalized_fields

    assert result.errors == []
    assert result.unsupported_keys == []
    assert fields["max_redirects"] == "3"
    assert fields["timeout"] == "30"
    assert fields["check.request.method"] == "POST"
    assert fields["check.request.headers"] == {"X-Api-Key": "secret"}
    assert fields["check.request.body"] == {"type": "json", "value": '{"q": 1}'}
    assert fields["check.response.status"] == ["200", "201"]
    assert fields["check.response.body.positive"] == ["ok"]
    assert fields["__ui"] == {"is_tls_enabled": True}


def test_http_multiple_urls_reports_error_and_keeps_first(make_ctx) -> None:
    monitor = _http_monitor(urls=["https://a.example", "https://b.example"])
    (result,) = normalize_project_monitors([monitor], make_ctx("8.5.0"))

    assert result.normalized_fields["urls"] == "https://a.example"
    assert [e.reason for e in result.errors] == ["Unsupported Heartbeat option"]
    assert (
        "Multiple urls are not supported for http project monitors in 8.5.0"
        in result.errors[0].details
    )


def test_http_unknown_nested_option_is_reported(make_ctx) -> None:
    monitor = _http_monitor(check={"response": {"json": [{"expression": "ok"}]}})
    (result,) = normalize_project_monitors([monitor], make_ctx("8.5.0"))

    assert result.unsupported_keys == ["check.response.json"]
    assert "check.response.json" in result.errors[-1].details


def test_invalid_schedule_is_reported_with_default_schedule(make_ctx) -> None:
    monitor = _http_monitor(schedule="every tuesday")
    (result,) = normalize_project_monitors([monitor], make_ctx("8.5.0"))

    assert result.normalized_fields["schedule"] == {"number": "3", "unit": "m"}
    assert [e.reason for e in result.errors] == ["Invalid schedule"]


def test_schedule_object_is_one_option(make_ctx) -> None:
    (result,) = normalize_project_monitors(
        [_http_monitor(schedule={"number": "30", "unit": "s"})], make_ctx("8.5.0")
    )

    assert result.errors == []
    assert result.unsupported_keys == []
    assert result.normalized_fields["schedule"] == {"number": "30", "unit": "s"}


def test_malformed_schedule_object_is_an_invalid_schedule(make_ctx) -> None:
    (result,) = normalize_project_monitors(
        [_http_monitor(schedule={"every": "tuesday"})], make_ctx("8.5.0")
    )

    assert result.unsupported_keys == []
    assert result.normalized_fields["schedule"] == {"number": "3", "unit": "m"}
    assert [e.reason for e in result.errors] == ["Invalid schedule"]
