from __future__ import annotations

import json

from projmon.cli.main import main


def _write_batch(tmp_path, payload) -> str:
    path = tmp_path / "monitors.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_cli_normalize_prints_results(tmp_path, capsys) -> None:
    path = _write_batch(
        tmp_path,
        {
            "projectId": "test-project-id",
            "namespace": "test-space",
            "version": "8.5.0",
            "locations": [{"id": "us_central", "label": "Test Location"}],
            "monitors": [
                {
                    "type": "tcp",
                    "id": "smtp",
                    "hosts": "smtp.example.com:587",
                    "locations": ["us_central"],
                }
            ],
        },
    )

    assert main(["normalize", path]) == 0
    out = json.loads(capsys.readouterr().out)
    assert len(out) == 1
    fields = out[0]["normalizedFields"]
    assert fields["hosts"] == "smtp.example.com:587"
    assert fields["custom_heartbeat_id"] == "smtp-test-project-id-test-space"
    assert fields["locations"][0]["id"] == "us_central"


def test_cli_normalize_overrides_and_strict_mode(tmp_path, capsys) -> None:
    path = _write_batch(tmp_path, [{"type": "icmp", "id": "a", "hosts": "1.1.1.1,2.2.2.2"}])

    assert main(["normalize", path, "--project-id", "p1", "--version", "8.6.0"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out[0]["normalizedFields"]["project_id"] == "p1"
    assert out[0]["errors"][0]["reason"] == "Unsupported Heartbeat option"

    assert main(["normalize", path, "--strict"]) == 1


def test_cli_normalize_bad_input_exits_2(tmp_path, capsys) -> None:
    assert main(["normalize", str(tmp_path / "missing.json")]) == 2
    assert "file not found" in capsys.readouterr().err

    bad = _write_batch(tmp_path, {"not": "a batch"})
    assert main(["normalize", bad]) == 2
    assert "invalid input" in capsys.readouterr().err


def test_cli_normalize_unsupported_version_exits_2(tmp_path, capsys) -> None:
    path = _write_batch(tmp_path, [{"type": "icmp", "id": "a"}])

    assert main(["normalize", path, "--version", "8.4.0"]) == 2
    assert capsys.readouterr().err.startswith("error:")


def test_cli_show_schema(capsys) -> None:
    assert main(["show-schema", "browser", "--version", "8.5.0"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["range"] == ["8.5.0", "8.6.0"]
    assert "throttling" in out["recognized_paths"]
    assert out["defaults"]["throttling.config"] == "5d/3u/20l"

    assert main(["show-schema", "udp"]) == 2


def test_cli_list_types(capsys) -> None:
    assert main(["list-types"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert "icmp  [8.5.0, 8.6.0), [8.6.0, *)" in lines
    assert len(lines) == 4


def test_cli_normalize_rejects_location_ids_instead_of_objects(tmp_path, capsys) -> None:
    path = _write_batch(
        tmp_path,
        {
            "projectId": "p",
            "locations": ["us_central"],
            "monitors": [{"type": "icmp", "id": "a", "hosts": "1.1.1.1"}],
        },
    )
    assert main(["normalize", path]) == 2
    assert "error: invalid input: locations" in capsys.readouterr().err

    listed = _write_batch(tmp_path, [{"type": "icmp", "id": "a", "hosts": "1.1.1.1"}])
    private = tmp_path / "private.json"
    private.write_text(json.dumps({"id": "germany"}), encoding="utf-8")
    assert main(["normalize", listed, "--private-locations", str(private)]) == 2
    assert "error: invalid input: privateLocations" in capsys.readouterr().err
