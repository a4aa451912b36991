"""
HTTP security middleware and CORS configuration
"""
import os
import logging
from typing import List, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse

logger = logging.getLogger(__name__)

# Stripe.js and its card iframes are loaded by the booking page
STRIPE_CSP = "; ".join([
    "default-src 'self'",
    "script-src 'self' https://js.stripe.com",
    "connect-src 'self' https://api.stripe.com",
    "frame-src https://js.stripe.com https://hooks.stripe.com",
    "img-src 'self' data: https:",
    "frame-ancestors 'none'",
])

RESPONSE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Content-Security-Policy": STRIPE_CSP,
}


def _is_production() -> bool:
    return os.getenv("ENVIRONMENT") == "production"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.update(RESPONSE_HEADERS)
        if _is_production():
            response.headers["Strict-Transport-Security"] = "max-age=31536000"
        return response


class HTTPSRedirectMiddleware(BaseHTTPMiddleware):
    """Send plain-HTTP requests to the HTTPS origin (TLS ends at the proxy)"""

    async def dispatch(self, request: Request, call_next):
        scheme = request.headers.get("X-Forwarded-Proto", request.url.scheme)
        if scheme == "http":
            return RedirectResponse(url=str(request.url.replace(scheme="https")), status_code=301)
        return await call_next(request)


def _csv_env(name: str) -> List[str]:
    """Comma-separated env list; unset or blank means everything"""
    items = [item.strip() for item in (os.getenv(name) or "").split(",") if item.strip()]
    return items or ["*"]


def resolve_cors_configuration() -> dict:
    # Browsers send origins without a trailing slash
    origins = [origin.rstrip("/") for origin in _csv_env("CORS_ALLOWED_ORIGINS")]
    allow_credentials = os.getenv("CORS_ALLOW_CREDENTIALS", "false").lower() == "true"
    if "*" in origins and allow_credentials:
        logger.warning("⚠️ CORS_ALLOW_CREDENTIALS ignored with wildcard origins")
        allow_credentials = False

    cors_config = {
        "allow_origins": origins,
        "allow_methods": _csv_env("CORS_ALLOWED_METHODS"),
        "allow_headers": _csv_env("CORS_ALLOWED_HEADERS"),
        "allow_credentials": allow_credentials,
    }
    origin_regex: Optional[str] = os.getenv("CORS_ALLOWED_ORIGIN_REGEX")
    if origin_regex:
        cors_config["allow_origin_regex"] = origin_regex
    return cors_config
