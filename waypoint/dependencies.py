"""
Waypoint API: Configuration Dependencies
========================================

What:  FastAPI dependency providers that hand configuration namespaces to
       route handlers by name.
How:   create_app() stores the ConfigRegistry on app.state; these providers
       read it from the current request's app. Nothing here touches os.environ.

Usage:
    @router.get("/upload-signature")
    async def sign(media: MediaStorageConfig = Depends(config_namespace("media_storage"))):
        ...
"""

from typing import Callable

from fastapi import Depends, Request

from waypoint.config.namespaces import (
    ConfigRegistry,
    Namespace,
    ServerConfig,
)


def get_registry(request: Request) -> ConfigRegistry:
    """Return the registry attached at startup."""
    registry = getattr(request.app.state, "config", None)
    if registry is None:
        raise RuntimeError("Configuration requested before application startup completed")
    return registry


def config_namespace(name: str) -> Callable[..., Namespace]:
    """
    Build a dependency that resolves one namespace by name.

    Unknown names raise NamespaceNotFoundError when the dependency runs.
    """

    def dependency(registry: ConfigRegistry = Depends(get_registry)) -> Namespace:
        return registry[name]

    dependency.__name__ = f"get_{name}_config"
    return dependency


def get_server_config(registry: ConfigRegistry = Depends(get_registry)) -> ServerConfig:
    return registry.typed("server", ServerConfig)

