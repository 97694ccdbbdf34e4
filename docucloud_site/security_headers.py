"""
Security headers middleware for safer HTTP defaults.
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware


def build_hsts_value(settings) -> str:
    value = f"max-age={int(settings.hsts_max_age)}"
    if settings.hsts_include_subdomains:
        value = f"{value}; includeSubDomains"
    return value


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds the standard hardening headers to every response.

    Content-Security-Policy is only sent in production so the site can be
    developed against local assets without a policy getting in the way.
    """

    def __init__(self, app, settings):
        super().__init__(app)
        self.settings = settings

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        settings = self.settings

        if not settings.security_headers_enabled:
            return response

        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", settings.x_frame_options)
        response.headers.setdefault("Referrer-Policy", settings.referrer_policy)
        if settings.is_production and settings.content_security_policy:
            response.headers.setdefault("Content-Security-Policy", settings.content_security_policy)

        forwarded_proto = request.headers.get("X-Forwarded-Proto", "")
        is_https = request.url.scheme == "https" or forwarded_proto.lower() == "https"
        if is_https:
            response.headers.setdefault("Strict-Transport-Security", build_hsts_value(settings))

        return response
