"""Shared FastAPI dependencies for bearer authentication and role checks."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Depends, HTTPException, Request, status

from app.middleware.revoked_token import extract_bearer_token
from app.models.user import UserRole
from app.services.tokens import InvalidTokenError, TokenExpiredError, TokenIssuer

logger = logging.getLogger(__name__)


def get_token_issuer(request: Request) -> TokenIssuer:
    """Dependency returning the issuer built at application startup."""
    return request.app.state.token_issuer


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_bearer_token(request: Request) -> str:
    """Dependency returning the raw bearer token or raising 401."""
    token = extract_bearer_token(request)
    if not token:
        raise _unauthorized("Missing or invalid authorization header")
    return token


def get_current_claims(
    token: str = Depends(get_bearer_token),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> dict[str, Any]:
    """Dependency returning verified claims of the presented token.

    Revocation is handled earlier by RevokedTokenMiddleware.
    """
    try:
        return issuer.verify(token)
    except TokenExpiredError as e:
        raise _unauthorized("Token has expired") from e
    except InvalidTokenError as e:
        logger.debug(f"Rejected bearer token: {e}")
        raise _unauthorized("Invalid token") from e


def claims_user_id(claims: dict[str, Any]) -> int:
    """Return the numeric user id carried in the sub claim."""
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError) as e:
        raise _unauthorized("Invalid token subject") from e


def require_role(role: UserRole) -> Callable[..., Awaitable[dict[str, Any]]]:
    """Build a dependency that allows only tokens carrying the given role claim."""

    async def _check(claims: dict[str, Any] = Depends(get_current_claims)) -> dict[str, Any]:
        if claims.get("role") != role.value:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{role.value} role required",
            )
        return claims

    return _check


require_admin = require_role(UserRole.ADMIN)
require_customer = require_role(UserRole.CUSTOMER)
