"""
Waypoint API: Routes Package
============================

Route Inventory:
    - info.py:    GET /api/info   (prefixed, like every business route)
    - health.py:  GET /health     (liveness probe, never prefixed)

Routers listed in API_ROUTERS are mounted under the global prefix by
main.create_app(); the health router is mounted on its own.
"""

from waypoint.routes import health, info

API_ROUTERS = (info.router,)

__all__ = ["API_ROUTERS", "health", "info"]
