"""Demo endpoints exercising bearer auth and role checks."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends

from app.api.deps import get_current_claims, require_admin, require_customer
from app.schemas.auth import ProtectedDataResponse

router = APIRouter(prefix="/protected", tags=["protected"])


def _echo(message: str, claims: dict[str, Any]) -> ProtectedDataResponse:
    return ProtectedDataResponse(
        message=message,
        user_id=claims.get("sub"),
        username=claims.get("username"),
        email=claims.get("email"),
        role=claims.get("role"),
        timestamp=datetime.now(UTC),
    )


@router.get("/data", response_model=ProtectedDataResponse)
async def protected_data(
    claims: dict[str, Any] = Depends(get_current_claims),
) -> ProtectedDataResponse:
    """Available to any authenticated user."""
    return _echo("This is protected data", claims)


@router.get("/admin", response_model=ProtectedDataResponse)
async def admin_only(claims: dict[str, Any] = Depends(require_admin)) -> ProtectedDataResponse:
    return _echo("This is admin-only data", claims)


@router.get("/customer", response_model=ProtectedDataResponse)
async def customer_only(
    claims: dict[str, Any] = Depends(require_customer),
) -> ProtectedDataResponse:
    return _echo("This is customer-only data", claims)
