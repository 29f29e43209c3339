"""
Waypoint API: Configuration Package
===================================

Startup pipeline, run exactly once per process:

    snapshot_environment()  →  validate_env()  →  project()
         RawEnvironment        ValidatedConfig     ConfigRegistry

Any failure in validate_env() raises ConfigValidationError and the server
never binds its listener.
"""

from pathlib import Path
from typing import Mapping, Optional, Union

from waypoint.config.environment import DEFAULT_ENV_FILE, snapshot_environment
from waypoint.config.namespaces import (
    CacheConfig,
    ConfigRegistry,
    DatabaseConfig,
    IdentityProviderConfig,
    MappingServiceConfig,
    MediaStorageConfig,
    Namespace,
    RateLimitConfig,
    ServerConfig,
    SigningConfig,
    project,
    split_origins,
)
from waypoint.config.runtime import RuntimeSettings, load_runtime_settings
from waypoint.config.schema import ENV_SCHEMA, FieldKind, FieldSpec
from waypoint.config.validator import ValidatedConfig, validate_env


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    env_file: Union[str, Path, None] = DEFAULT_ENV_FILE,
) -> ConfigRegistry:
    """Snapshot, validate and project the environment in one call."""
    raw = snapshot_environment(environ, env_file)
    return project(validate_env(raw))


__all__ = [
    "ENV_SCHEMA",
    "CacheConfig",
    "ConfigRegistry",
    "DatabaseConfig",
    "FieldKind",
    "FieldSpec",
    "IdentityProviderConfig",
    "MappingServiceConfig",
    "MediaStorageConfig",
    "Namespace",
    "RateLimitConfig",
    "RuntimeSettings",
    "ServerConfig",
    "SigningConfig",
    "ValidatedConfig",
    "load_config",
    "load_runtime_settings",
    "project",
    "snapshot_environment",
    "split_origins",
    "validate_env",
]
