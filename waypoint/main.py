"""
Waypoint API: Application Factory and Bootstrap
===============================================

What:  Builds the FastAPI application from a validated ConfigRegistry and
       starts the HTTP listener.
How:   create_app() is a pure factory (no environment access); run() is the
       process entry point that validates configuration, binds the socket
       and hands it to uvicorn.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware (outermost first):                      │
    │  Security Headers → CORS → Request ID → Logging     │
    │  → Rate Limit                                       │
    │                                                     │
    │  Routes:                                            │
    │  /api/info (global prefix)     /health (unprefixed) │
    └─────────────────────────────────────────────────────┘

Startup (run):
    1. Snapshot the environment once; configure logging from RuntimeSettings
       built from that snapshot (an invalid LOG_LEVEL exits like step 2)
    2. Validate the same snapshot; on failure exit non-zero with
       the itemized report, before anything is bound
    3. Build the app from the namespace registry
    4. Bind the listener on the configured port (bind errors are fatal)
    5. Log the listening URL and the active environment, then serve
"""

import logging
import socket
import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Mapping, Optional, Union

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from waypoint import __version__
from waypoint.config import (
    ConfigRegistry,
    RateLimitConfig,
    ServerConfig,
    load_config,
    load_runtime_settings,
    snapshot_environment,
)
from waypoint.config.environment import DEFAULT_ENV_FILE
from waypoint.exceptions import (
    ConfigValidationError,
    ListenerBindError,
    NotFoundError,
    RateLimitExceededError,
    WaypointError,
)
from waypoint.middleware import (
    RateLimitMiddleware,
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    request_id_var,
)
from waypoint.routes import API_ROUTERS, health

logger = logging.getLogger("waypoint.bootstrap")

GLOBAL_PREFIX = "api"


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s on stdout.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every request or connection
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    registry: ConfigRegistry = app.state.config
    logger.info("Waypoint API starting up (%d config namespaces)", len(registry))

    yield

    logger.info("Waypoint API shutting down...")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to JSON error responses.

        NotFoundError           → 404
        RateLimitExceededError  → 429 (+ Retry-After)
        WaypointError (base)    → 500, generic message
        Exception (fallback)    → 500, generic message

    Context dicts and stack traces are logged, never returned.
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={"error": "not_found", "message": exc.message, "request_id": rid},
        )

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=429,
            content={
                "error": "rate_limit_exceeded",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(WaypointError)
    async def handle_app_error(request: Request, exc: WaypointError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(registry: ConfigRegistry) -> FastAPI:
    """
    Assemble the FastAPI application around an already-validated registry.

    Builds a fresh app per call and never reads the environment, so tests can
    create several apps with different configurations side by side.
    """
    server = registry.typed("server", ServerConfig)
    rate_limit = registry.typed("rate_limit", RateLimitConfig)

    app = FastAPI(
        title="Waypoint API",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=f"/{GLOBAL_PREFIX}/openapi.json",
        lifespan=lifespan,
    )
    app.state.config = registry
    app.state.started_at = time.monotonic()

    # ── Middleware ────────────────────────────────────────────────────────
    # Last added runs first: security headers wrap everything, CORS answers
    # preflights before the limiter counts them.
    app.add_middleware(RateLimitMiddleware, config=rate_limit)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(server.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(SecurityHeadersMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    for router in API_ROUTERS:
        app.include_router(router, prefix=f"/{GLOBAL_PREFIX}")
    app.include_router(health.router)

    return app


# ══════════════════════════════════════════════════════════════════════════
# Listener & Entry Points
# ══════════════════════════════════════════════════════════════════════════

def bind_listener(host: str, port: int) -> socket.socket:
    """
    Bind the TCP socket the server will accept connections on.

    Raises:
        ListenerBindError: port in use or out of range, permission denied,
        unresolvable host. Never retried.
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except (OSError, OverflowError) as exc:
        sock.close()
        reason = getattr(exc, "strerror", None) or str(exc)
        raise ListenerBindError(host, port, reason) from exc
    sock.set_inheritable(True)
    return sock


def serve(app: FastAPI, sock: socket.socket, log_level: str = "INFO") -> None:
    """Run uvicorn on a socket bound by bind_listener()."""
    config = uvicorn.Config(
        app,
        log_config=None,
        log_level=log_level.lower(),
        access_log=False,
    )
    uvicorn.Server(config).run(sockets=[sock])


def run(
    environ: Optional[Mapping[str, str]] = None,
    env_file: Union[str, Path, None] = DEFAULT_ENV_FILE,
) -> None:
    """
    Console entry point: validate, build, bind, serve.

    Exits with status 1 and the validation report on stderr when the
    environment (runtime settings included) is invalid. Bind failures
    propagate as ListenerBindError.
    """
    raw = snapshot_environment(environ, env_file)
    try:
        runtime = load_runtime_settings(raw)
    except ConfigValidationError as exc:
        sys.exit(exc.report)
    setup_logging(runtime.log_level)

    try:
        registry = load_config(raw, env_file=None)
    except ConfigValidationError as exc:
        sys.exit(exc.report)

    app = create_app(registry)
    server = registry.typed("server", ServerConfig)
    sock = bind_listener(runtime.host, server.port)

    logger.info("Application running on http://localhost:%d", server.port)
    logger.info("Environment: %s", server.environment)

    serve(app, sock, runtime.log_level)


def build_app() -> FastAPI:
    """
    Factory for `uvicorn waypoint.main:build_app --factory`.

    Validates the process environment; invalid configuration raises
    ConfigValidationError and uvicorn aborts startup.
    """
    return create_app(load_config())


if __name__ == "__main__":
    run()
