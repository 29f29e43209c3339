"""
Waypoint API: Security Headers Middleware
=========================================

What:  Adds a fixed set of protective HTTP headers to every response.
How:   Outermost middleware, so error responses, CORS preflights and 429s
       carry the headers too. Values a handler already set are left alone.

Header set:
    Content-Security-Policy            restrictive same-origin policy
    Cross-Origin-Opener-Policy         same-origin
    Cross-Origin-Resource-Policy       same-origin
    Origin-Agent-Cluster               ?1
    Referrer-Policy                    no-referrer
    Strict-Transport-Security          1 year, include subdomains
    X-Content-Type-Options             nosniff
    X-DNS-Prefetch-Control             off
    X-Download-Options                 noopen
    X-Frame-Options                    SAMEORIGIN
    X-Permitted-Cross-Domain-Policies  none
    X-XSS-Protection                   0 (legacy auditor disabled)
"""

from typing import Dict, Mapping, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

CONTENT_SECURITY_POLICY = "; ".join(
    [
        "default-src 'self'",
        "base-uri 'self'",
        "font-src 'self' https: data:",
        "form-action 'self'",
        "frame-ancestors 'self'",
        "img-src 'self' data:",
        "object-src 'none'",
        "script-src 'self'",
        "script-src-attr 'none'",
        "style-src 'self' https: 'unsafe-inline'",
        "upgrade-insecure-requests",
    ]
)

DEFAULT_SECURITY_HEADERS: Dict[str, str] = {
    "Content-Security-Policy": CONTENT_SECURITY_POLICY,
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Applies DEFAULT_SECURITY_HEADERS (or a supplied set) to every response."""

    def __init__(self, app: ASGIApp, headers: Optional[Mapping[str, str]] = None):
        super().__init__(app)
        self.headers = dict(DEFAULT_SECURITY_HEADERS if headers is None else headers)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        # Starlette never sets it, but a proxied app might.
        if "x-powered-by" in response.headers:
            del response.headers["x-powered-by"]
        return response
