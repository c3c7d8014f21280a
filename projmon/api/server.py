from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException

from projmon.api.middleware import RequestLogMiddleware
from projmon.api.models import (
    MonitorResultOut,
    NormalizeIn,
    NormalizeOut,
    SchemaOut,
)
from projmon.core.normalization import (
    MonitorType,
    NormalizationContext,
    SchemaConfigurationError,
    SchemaRegistry,
    default_registry,
    normalize_project_monitors,
    supported_monitor_types,
)

log = logging.getLogger("projmon.api")


@dataclass(frozen=True, slots=True)
class ServiceConfig:
    """Configuration for the API service.

    - max_monitors: largest accepted batch (413 above it)
    - default_version: product version used when a request omits one
    """

    max_monitors: int = 250
    default_version: str = "8.6.0"
    log_level: str = "INFO"

    @staticmethod
    def from_env() -> "ServiceConfig":
        """Read PROJMON_* environment variables.

        Security notes:
        - Env vars are treated as trusted server configuration.
        """

        return ServiceConfig(
            max_monitors=_env_int("PROJMON_MAX_MONITORS", 250),
            default_version=(os.environ.get("PROJMON_DEFAULT_VERSION") or "8.6.0").strip(),
            log_level=(os.environ.get("PROJMON_LOG_LEVEL") or "INFO").strip().upper(),
        )


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except ValueError:
        log.warning("invalid_env_int", extra={"env_var": name})
        return int(default)


def create_app(
    *, config: Optional[ServiceConfig] = None, registry: Optional[SchemaRegistry] = None
) -> FastAPI:
    """Create the FastAPI app."""

    cfg = config or ServiceConfig.from_env()
    schemas = registry or default_registry()

    log.setLevel(cfg.log_level)

    app = FastAPI(title="projmon API", version="0.1")
    app.state.cfg = cfg
    app.state.registry = schemas
    app.add_middleware(RequestLogMiddleware)

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {
            "ok": True,
            "default_version": cfg.default_version,
            "monitor_types": [t.value for t in supported_monitor_types(schemas)],
        }

    @app.get("/schemas/{monitor_type}", response_model=SchemaOut)
    def get_schema(monitor_type: str, version: Optional[str] = None) -> SchemaOut:
        """Describe the options recognized for a monitor type at a version."""

        mt = MonitorType.parse(monitor_type)
        if mt is None:
            raise HTTPException(status_code=404, detail="unknown_monitor_type")
        effective = version or cfg.default_version
        try:
            definition = schemas.schema_for(mt, effective)
        except SchemaConfigurationError as e:
            raise HTTPException(
                status_code=422, detail={"error": "unsupported_version", "reason": str(e)}
            )
        return SchemaOut(
            monitor_type=mt.value,
            version=effective,
            min_version=definition.min_version,
            max_version=definition.max_version,
            recognized_paths=sorted(definition.recognized_paths),
            always_present=sorted(definition.always_present),
        )

    @app.post("/project-monitors/normalize", response_model=NormalizeOut)
    def normalize_endpoint(body: NormalizeIn) -> NormalizeOut:
        """Normalize a project-push batch.

        The response lists one result per submitted monitor, in order. The
        caller decides what to persist; this endpoint stores nothing.
        """

        if len(body.monitors) > cfg.max_monitors:
            raise HTTPException(status_code=413, detail="too_many_monitors")

        ctx = NormalizationContext(
            project_id=body.project_id,
            namespace=body.namespace,
            version=body.version or cfg.default_version,
            locations=[loc.to_location() for loc in body.locations],
            private_locations=[loc.to_private_location() for loc in body.private_locations],
        )
        try:
            results = normalize_project_monitors(body.monitors, ctx, registry=schemas)
        except SchemaConfigurationError as e:
            raise HTTPException(
                status_code=422, detail={"error": "unsupported_version", "reason": str(e)}
            )

        out = [MonitorResultOut(**r.to_dict()) for r in results]
        failed = sum(1 for r in results if r.errors)
        log.info(
            "project_monitors_normalized",
            extra={
                "project_id": ctx.project_id,
                "version": ctx.version,
                "monitor_count": len(results),
                "failed_count": failed,
            },
        )
        return NormalizeOut(version=ctx.version, results=out, failed_count=failed)

    return app
