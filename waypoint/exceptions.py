"""
Waypoint API: Exception Hierarchy
=================================

What:  Application-specific exceptions for startup and request-time failures.
How:   Each exception carries a human-readable message and an optional context
       dict. Startup failures are raised out of the bootstrap sequence; the
       request-time ones are rendered by the handlers registered in main.py.

Exception Hierarchy:
    WaypointError (base)
    ├── ConfigValidationError    → fatal, process exits before binding
    ├── ListenerBindError        → fatal, propagated out of run()
    ├── NotFoundError            → 404 Not Found
    │   └── NamespaceNotFoundError
    └── RateLimitExceededError   → 429 Too Many Requests
"""

from typing import Any, Dict, List, NamedTuple, Optional, Sequence


class WaypointError(Exception):
    """
    Base exception for all Waypoint application errors.

    Attributes:
        message:  Human-readable description (safe to show to operators/clients)
        context:  Additional debug info (logged, never returned to HTTP clients)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class FieldError(NamedTuple):
    """One field-level validation failure: the dotted field path and a message."""

    path: str
    message: str


class ConfigValidationError(WaypointError):
    """
    Raised when the environment fails validation.

    What:    One or more configuration fields are missing or malformed.
    When:    Once, at startup, after every field has been checked.
    Effect:  Fatal. The server must not start listening.

    The message is the operator-facing report:

        Environment validation failed:
          - JWT_SECRET: String should have at least 32 characters
          - NODE_ENV: Input should be 'development', 'production' or 'test'

        Check your .env file against .env.example
    """

    HEADER = "Environment validation failed:"
    HINT = "Check your .env file against .env.example"

    def __init__(self, errors: Sequence[FieldError]):
        self.errors: List[FieldError] = list(errors)
        super().__init__(
            message=self.format_report(self.errors),
            context={"fields": [error.path for error in self.errors]},
        )

    @property
    def report(self) -> str:
        return self.message

    @classmethod
    def format_report(cls, errors: Sequence[FieldError]) -> str:
        lines = "\n".join(f"  - {error.path}: {error.message}" for error in errors)
        return f"{cls.HEADER}\n{lines}\n\n{cls.HINT}"


class ListenerBindError(WaypointError):
    """
    Raised when the HTTP listener cannot bind its socket.

    What:    Port already in use, permission denied, unknown host, etc.
    Effect:  Fatal and never retried; the original OSError is chained.
    """

    def __init__(self, host: str, port: int, reason: str = ""):
        message = f"Could not bind listener to {host}:{port}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message=message, context={"host": host, "port": port})
        self.host = host
        self.port = port


class NotFoundError(WaypointError):
    """
    Raised when a requested resource does not exist.

    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class NamespaceNotFoundError(NotFoundError, KeyError):
    """Raised when a collaborator asks the registry for an unknown namespace."""

    def __init__(self, name: str, available: Sequence[str] = ()):
        super().__init__(
            resource="Configuration namespace",
            resource_id=name,
            context={"available": list(available)},
        )
        self.name = name

    def __str__(self) -> str:
        return self.message


class RateLimitExceededError(WaypointError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests, with a Retry-After header in seconds.
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many requests. Please wait {retry_after} seconds before retrying."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
