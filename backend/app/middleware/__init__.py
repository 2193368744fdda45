"""Middleware module for the SNIC API."""

from app.middleware.revoked_token import RevokedTokenMiddleware, extract_bearer_token
from app.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "RevokedTokenMiddleware",
    "SecurityHeadersMiddleware",
    "extract_bearer_token",
]
