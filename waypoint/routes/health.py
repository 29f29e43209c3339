"""
Waypoint API: Liveness Route
============================

What:  GET /health for container and load balancer probes.
How:   Mounted WITHOUT the global /api prefix, and exempt from rate limiting
       and access logging. A response means the process started, which in
       turn means its configuration validated.
"""

import time

from fastapi import APIRouter, Depends, Request

from waypoint import __version__
from waypoint.config.namespaces import ServerConfig
from waypoint.dependencies import get_server_config
from waypoint.schemas.system import HealthResponse

HEALTH_PATH = "/health"

router = APIRouter(tags=["Health"])


@router.get(
    HEALTH_PATH,
    response_model=HealthResponse,
    summary="Liveness probe",
)
async def health_check(
    request: Request,
    server: ServerConfig = Depends(get_server_config),
) -> HealthResponse:
    started_at = getattr(request.app.state, "started_at", time.monotonic())
    return HealthResponse(
        status="ok",
        version=__version__,
        environment=server.environment,
        uptime_seconds=round(time.monotonic() - started_at, 2),
    )
