"""
Waypoint API: Middleware Package
================================

Cross-cutting concerns applied to every request.

Execution order (outermost first), as registered in main.create_app():
    Request → [Security Headers] → [CORS] → [Request ID] → [Logging]
            → [Rate Limit] → Route Handler

Security headers sit outside CORS so preflight answers get them as well; the
rate limiter sits inside the logger so rejected requests are still logged.
"""

from waypoint.middleware.logging import RequestLoggingMiddleware
from waypoint.middleware.rate_limit import RateLimitMiddleware
from waypoint.middleware.request_id import RequestIDMiddleware, request_id_var
from waypoint.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "RateLimitMiddleware",
    "RequestIDMiddleware",
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "request_id_var",
]
