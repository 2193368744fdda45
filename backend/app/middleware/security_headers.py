"""Security headers middleware for the JSON API."""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

# Responses are JSON or plain text only, so nothing may be framed or loaded.
API_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
}

# Token-bearing responses must never be cached by intermediaries
NO_STORE_PREFIXES = ("/api/auth",)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        for name, value in API_SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)

        if request.url.path.startswith(NO_STORE_PREFIXES):
            response.headers["Cache-Control"] = "no-store"
            response.headers["Pragma"] = "no-cache"

        forwarded_proto = request.headers.get("x-forwarded-proto", "")
        if forwarded_proto == "https" or request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response
