"""
Waypoint API: System Response Schemas
=====================================

What:  Response models for the liveness probe and the service info route.
How:   FastAPI serializes handler results through these models and publishes
       them in the OpenAPI document.
"""

from typing import List

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """
    Returned by GET /health (never prefixed).

    Liveness only: the process is up and its configuration validated. It does
    not probe the database or third-party services.
    """
    status: str = Field(description="Always 'ok' while the process serves requests")
    version: str = Field(description="Application version")
    environment: str = Field(description="Active NODE_ENV value")
    uptime_seconds: float = Field(description="Seconds since the app was created")


class ServiceInfoResponse(BaseModel):
    """Returned by GET /api/info."""
    name: str
    version: str
    environment: str
    namespaces: List[str] = Field(
        description="Configuration namespaces available to collaborators (names only)"
    )
