"""
Waypoint API: Rate Limiting Middleware
======================================

What:  Per-client sliding window limiter driven by the `rate_limit` namespace.
How:   Keeps recent request timestamps per client IP in memory. A request is
       rejected with 429 once `limit` requests fall inside the last `ttl`
       milliseconds; Retry-After tells the client when the oldest one expires.

Algorithm: Sliding Window Log
    1. Drop timestamps older than now - ttl
    2. If remaining count >= limit, reject
    3. Otherwise record now and pass the request on

State is process-local, so the limit applies per worker process.
"""

import logging
import math
import time
from collections import defaultdict
from typing import Callable, Dict, FrozenSet, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from waypoint.config.namespaces import RateLimitConfig
from waypoint.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

# Inactive clients are swept every this many recorded requests.
CLEANUP_INTERVAL = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Args:
        app:             Downstream ASGI app
        config:          RateLimitConfig (ttl in ms, limit per window)
        excluded_paths:  Paths never counted (the liveness probe)
        clock:           Seconds-resolution time source, injectable for tests
    """

    def __init__(
        self,
        app: ASGIApp,
        config: RateLimitConfig,
        excluded_paths: FrozenSet[str] = frozenset({"/health"}),
        clock: Optional[Callable[[], float]] = None,
    ):
        super().__init__(app)
        self.window = config.ttl / 1000.0
        self.limit = config.limit
        self.excluded_paths = excluded_paths
        self._clock = clock or time.monotonic
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._recorded = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.excluded_paths:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = self._clock()
        window_start = now - self.window

        timestamps = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = timestamps

        if len(timestamps) >= self.limit:
            retry_after = max(1, math.ceil(timestamps[0] + self.window - now))
            exc = RateLimitExceededError(retry_after=retry_after)
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %.0fs window",
                client_ip,
                len(timestamps),
                self.window,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                },
                headers={"Retry-After": str(exc.retry_after)},
            )

        timestamps.append(now)
        self._recorded += 1
        if self._recorded % CLEANUP_INTERVAL == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Forget clients with no request inside the current window."""
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
