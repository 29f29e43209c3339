"""
Waypoint API: Configuration Namespaces
======================================

What:  Splits the flat ValidatedConfig into named, typed, read-only records.
How:   Each namespace is a frozen pydantic model built by a pure projection
       function. project() runs them all once and returns a ConfigRegistry,
       which collaborators query by name (e.g. registry["database"]).
Who:   Built by load_config() at startup, stored on app.state, handed to
       request handlers through waypoint.dependencies.

Namespaces:
    server            environment, port, cors_origins
    database          url, direct_url
    cache             url (optional)
    identity_provider project_id, private_key, client_email
    signing           secret, expires_in
    media_storage     cloud_name, api_key, api_secret
    mapping_service   api_key
    rate_limit        ttl (milliseconds), limit
"""

from types import MappingProxyType
from typing import Callable, Dict, Iterator, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict

from waypoint.config.validator import ValidatedConfig
from waypoint.exceptions import NamespaceNotFoundError


class Namespace(BaseModel):
    """Base for all namespace records: immutable, no extra fields."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class ServerConfig(Namespace):
    environment: str
    port: int
    cors_origins: Tuple[str, ...]


class DatabaseConfig(Namespace):
    url: str
    direct_url: str


class CacheConfig(Namespace):
    url: Optional[str] = None


class IdentityProviderConfig(Namespace):
    project_id: str
    private_key: str
    client_email: str


class SigningConfig(Namespace):
    secret: str
    expires_in: str


class MediaStorageConfig(Namespace):
    cloud_name: str
    api_key: str
    api_secret: str


class MappingServiceConfig(Namespace):
    api_key: str


class RateLimitConfig(Namespace):
    ttl: int
    limit: int


def split_origins(value: str) -> Tuple[str, ...]:
    """
    Parse a comma-separated origin list.

    Elements are trimmed and order is kept. Empty elements are dropped, so an
    empty string allows no origins at all.
    """
    return tuple(origin.strip() for origin in value.split(",") if origin.strip())


# Name → projection. Dict order is the registry's iteration order.
PROJECTIONS: Dict[str, Callable[[ValidatedConfig], Namespace]] = {
    "server": lambda c: ServerConfig(
        environment=c["NODE_ENV"],
        port=c["PORT"],
        cors_origins=split_origins(c["CORS_ORIGINS"]),
    ),
    "database": lambda c: DatabaseConfig(
        url=c["DATABASE_URL"],
        direct_url=c["DATABASE_URL_DIRECT"],
    ),
    "cache": lambda c: CacheConfig(url=c["REDIS_URL"]),
    "identity_provider": lambda c: IdentityProviderConfig(
        project_id=c["FIREBASE_PROJECT_ID"],
        private_key=c["FIREBASE_PRIVATE_KEY"],
        client_email=c["FIREBASE_CLIENT_EMAIL"],
    ),
    "signing": lambda c: SigningConfig(
        secret=c["JWT_SECRET"],
        expires_in=c["JWT_EXPIRES_IN"],
    ),
    "media_storage": lambda c: MediaStorageConfig(
        cloud_name=c["CLOUDINARY_CLOUD_NAME"],
        api_key=c["CLOUDINARY_API_KEY"],
        api_secret=c["CLOUDINARY_API_SECRET"],
    ),
    "mapping_service": lambda c: MappingServiceConfig(api_key=c["GOONG_API_KEY"]),
    "rate_limit": lambda c: RateLimitConfig(
        ttl=c["THROTTLE_TTL"],
        limit=c["THROTTLE_LIMIT"],
    ),
}

N = TypeVar("N", bound=Namespace)


class ConfigRegistry(Mapping[str, Namespace]):
    """
    Immutable lookup table of namespace name → record.

    Also keeps the ValidatedConfig it was projected from, for the few
    consumers (startup logging, diagnostics) that need a flat field.
    """

    def __init__(self, config: ValidatedConfig, namespaces: Mapping[str, Namespace]):
        self._config = config
        self._namespaces = MappingProxyType(dict(namespaces))

    @property
    def config(self) -> ValidatedConfig:
        return self._config

    def __getitem__(self, name: str) -> Namespace:
        try:
            return self._namespaces[name]
        except KeyError:
            raise NamespaceNotFoundError(name, available=list(self._namespaces)) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._namespaces)

    def __len__(self) -> int:
        return len(self._namespaces)

    def __repr__(self) -> str:
        return f"ConfigRegistry({list(self._namespaces)})"

    def typed(self, name: str, model: Type[N]) -> N:
        """Look up a namespace and check it is the expected record type."""
        record = self[name]
        if not isinstance(record, model):
            raise TypeError(
                f"Namespace '{name}' is {type(record).__name__}, not {model.__name__}"
            )
        return record


def project(config: ValidatedConfig) -> ConfigRegistry:
    """
    Project a ValidatedConfig into every namespace.

    Pure: no I/O, no re-validation. Calling it twice on the same config yields
    equal registries.
    """
    namespaces = {name: build(config) for name, build in PROJECTIONS.items()}
    return ConfigRegistry(config, namespaces)
