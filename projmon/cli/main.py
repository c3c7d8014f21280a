from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List, Mapping

from projmon.core.normalization import (
    Location,
    MonitorType,
    NormalizationContext,
    PrivateLocation,
    SchemaConfigurationError,
    default_registry,
    normalize_project_monitors,
    supported_monitor_types,
)
from projmon.utils.json_safe import to_jsonable

DEFAULT_VERSION = "8.6.0"


def _print_json(obj: object) -> None:
    print(json.dumps(to_jsonable(obj), indent=2, sort_keys=True))


def _read_json(path: str) -> Any:
    """Read a JSON file."""

    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _load_batch(path: str) -> Dict[str, Any]:
    """Load a project-push batch file.

    Accepted shapes:
    - a list of monitors
    - an object with "monitors" plus optional projectId, namespace, version,
      locations and privateLocations
    """

    data = _read_json(path)
    if isinstance(data, list):
        return {"monitors": data}
    if isinstance(data, Mapping) and isinstance(data.get("monitors"), list):
        return dict(data)
    raise ValueError("batch file must be a list of monitors or an object with 'monitors'")


def _location_entries(raw: Any, name: str) -> List[Mapping[str, Any]]:
    """Return raw location entries, rejecting anything but a list of objects."""

    if raw is None:
        return []
    if not isinstance(raw, list) or not all(isinstance(loc, Mapping) for loc in raw):
        raise ValueError(f"{name} must be a list of location objects with an 'id'")
    return raw


def cmd_normalize(args: argparse.Namespace) -> int:
    """Normalize a project-push batch file and print the results.

    Exit codes: 0 ok, 1 some monitor reported errors (with --strict),
    2 bad input or unsupported version.
    """

    path = os.path.abspath(args.path)
    if not os.path.isfile(path):
        print(f"error: file not found: {path}", file=sys.stderr)
        return 2

    try:
        batch = _load_batch(path)
        locations = batch.get("locations")
        if args.locations:
            locations = _read_json(args.locations)
        locations = _location_entries(locations, "locations")
        private_locations = batch.get("privateLocations")
        if args.private_locations:
            private_locations = _read_json(args.private_locations)
        private_locations = _location_entries(private_locations, "privateLocations")

        ctx = NormalizationContext(
            project_id=args.project_id or str(batch.get("projectId", "")),
            namespace=args.namespace or str(batch.get("namespace", "default")),
            version=args.version or str(batch.get("version", DEFAULT_VERSION)),
            locations=[Location.from_dict(loc) for loc in locations],
            private_locations=[PrivateLocation.from_dict(loc) for loc in private_locations],
        )
    except (OSError, ValueError, KeyError, TypeError) as e:
        print(f"error: invalid input: {e}", file=sys.stderr)
        return 2

    try:
        results = normalize_project_monitors(batch["monitors"], ctx)
    except SchemaConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    _print_json(results)
    if args.strict and any(r.errors for r in results):
        return 1
    return 0


def cmd_show_schema(args: argparse.Namespace) -> int:
    """Print the options recognized for one monitor type at a version."""

    mt = MonitorType.parse(args.monitor_type)
    if mt is None:
        print(f"error: unknown monitor type: {args.monitor_type}", file=sys.stderr)
        return 2
    try:
        definition = default_registry().schema_for(mt, args.version)
    except SchemaConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    _print_json(
        {
            "monitor_type": mt.value,
            "version": args.version,
            "range": [definition.min_version, definition.max_version],
            "recognized_paths": sorted(definition.recognized_paths),
            "defaults": definition.build_defaults(),
        }
    )
    return 0


def cmd_list_types(_: argparse.Namespace) -> int:
    registry = default_registry()
    for mt in supported_monitor_types(registry):
        ranges = ", ".join(
            f"[{d.min_version}, {d.max_version or '*'})" for d in registry.definitions(mt)
        )
        print(f"{mt.value}  {ranges}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the projmon API server.

    Security notes:
    - Bind to 127.0.0.1 by default (safer than 0.0.0.0).
    - The API has no auth; put it behind the caller's gateway.
    """

    try:
        import uvicorn
    except ImportError as e:
        print(f"error: uvicorn is required to serve the API: {e}", file=sys.stderr)
        return 2

    from projmon.api.server import create_app

    uvicorn.run(
        create_app(), host=args.host, port=int(args.port), log_level=args.uvicorn_log_level
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    p = argparse.ArgumentParser(prog="projmon", description="Project monitor normalization")
    p.add_argument("--log-level", default="WARNING", help="Python log level for the engine")
    sub = p.add_subparsers(dest="cmd", required=True)

    np = sub.add_parser("normalize", help="Normalize a project-push batch file")
    np.add_argument("path", help="Path to a JSON batch file")
    np.add_argument("--project-id", default=None, help="Override the batch projectId")
    np.add_argument("--namespace", default=None, help="Override the batch namespace")
    np.add_argument("--version", default=None, help="Product version (default 8.6.0)")
    np.add_argument("--locations", default=None, help="JSON file of public locations")
    np.add_argument(
        "--private-locations", default=None, help="JSON file of private locations"
    )
    np.add_argument(
        "--strict", action="store_true", help="Exit 1 when any monitor reports errors"
    )
    np.set_defaults(func=cmd_normalize)

    sp = sub.add_parser("show-schema", help="Show recognized options for a monitor type")
    sp.add_argument("monitor_type", help="icmp | tcp | http | browser")
    sp.add_argument("--version", default=DEFAULT_VERSION, help="Product version")
    sp.set_defaults(func=cmd_show_schema)

    lp = sub.add_parser("list-types", help="List monitor types and schema version ranges")
    lp.set_defaults(func=cmd_list_types)

    sv = sub.add_parser("serve", help="Run the HTTP API (requires uvicorn)")
    sv.add_argument("--host", default="127.0.0.1")
    sv.add_argument("--port", default=8000, type=int)
    sv.add_argument("--uvicorn-log-level", default="info", help="uvicorn log level")
    sv.set_defaults(func=cmd_serve)

    return p


def main(argv: List[str] | None = None) -> int:
    """CLI entry."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=str(args.log_level).upper())
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
