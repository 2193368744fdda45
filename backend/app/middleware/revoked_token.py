"""Revoked token middleware.

Rejects any request whose bearer token has been blacklisted (e.g. by logout)
before it reaches a route. Signature, expiry and role checks are left to the
route dependencies; this layer only answers "has this token been revoked?".

The check fails open: if the blacklist store cannot be queried the request
continues and the failure is logged.
"""

import logging

from fastapi import Request, Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp

from app.services.token_blacklist import TokenBlacklistService

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
REVOKED_MESSAGE = "Token has been invalidated"


def extract_bearer_token(request: Request) -> str | None:
    """Return the token from an "Authorization: Bearer <token>" header.

    The prefix match is case-sensitive.
    """
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith(BEARER_PREFIX):
        return auth_header[len(BEARER_PREFIX) :].strip()
    return None


class RevokedTokenMiddleware(BaseHTTPMiddleware):
    """Short-circuit requests carrying a revoked token with 401."""

    def __init__(self, app: ASGIApp, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__(app)
        self._session_factory = session_factory

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        token = extract_bearer_token(request)
        if not token:
            return await call_next(request)

        try:
            async with self._session_factory() as db:
                revoked = await TokenBlacklistService(db).is_revoked(token)
        except Exception as e:
            logger.warning(
                f"Blacklist check failed for {request.method} {request.url.path}, allowing request: {e}"
            )
            return await call_next(request)

        if revoked:
            logger.warning(f"Revoked token used for: {request.method} {request.url.path}")
            return PlainTextResponse(REVOKED_MESSAGE, status_code=401)

        return await call_next(request)
