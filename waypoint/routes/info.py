"""
Waypoint API: Service Info Route
================================

GET /api/info: name, version, environment and the configuration namespaces
the process was started with. Values are never exposed, only names.
"""

from fastapi import APIRouter, Depends

from waypoint import __version__
from waypoint.config.namespaces import ConfigRegistry
from waypoint.dependencies import get_registry
from waypoint.schemas.system import ServiceInfoResponse

router = APIRouter(tags=["Info"])


@router.get("/info", response_model=ServiceInfoResponse, summary="Service information")
async def service_info(
    registry: ConfigRegistry = Depends(get_registry),
) -> ServiceInfoResponse:
    return ServiceInfoResponse(
        name="Waypoint API",
        version=__version__,
        environment=registry.config["NODE_ENV"],
        namespaces=list(registry),
    )
