"""REST API for insurance policies. Every route requires a bearer token."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_claims, require_admin
from app.core.database import get_db
from app.models.policy import Policy
from app.schemas.policy import PolicyCreate, PolicyResponse, PolicyUpdate
from app.services.policy import (
    DuplicatePolicyNumberError,
    PolicyService,
    ReferenceNotFoundError,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/policies",
    tags=["policies"],
    dependencies=[Depends(get_current_claims)],
)


def get_policy_service(db: AsyncSession = Depends(get_db)) -> PolicyService:
    return PolicyService(db)


def _to_response(policy: Policy) -> PolicyResponse:
    return PolicyResponse(
        id=policy.id,
        policy_number=policy.policy_number,
        holder_name=policy.holder_name,
        start_date=policy.start_date,
        end_date=policy.end_date,
        premium=float(policy.premium),
        product_id=policy.product_id,
        product_name=policy.product.name,
        user_id=policy.user_id,
        username=policy.user.username,
        created_at=policy.created_at,
        updated_at=policy.updated_at,
        is_active=policy.is_active,
    )


@router.get("", response_model=list[PolicyResponse])
async def list_policies(
    service: PolicyService = Depends(get_policy_service),
) -> list[PolicyResponse]:
    return [_to_response(p) for p in await service.list_all()]


@router.get("/active", response_model=list[PolicyResponse])
async def list_active_policies(
    service: PolicyService = Depends(get_policy_service),
) -> list[PolicyResponse]:
    """Policies whose coverage period includes now."""
    return [_to_response(p) for p in await service.list_active()]


@router.get("/by-product/{product_id}", response_model=list[PolicyResponse])
async def list_policies_by_product(
    product_id: int,
    service: PolicyService = Depends(get_policy_service),
) -> list[PolicyResponse]:
    return [_to_response(p) for p in await service.list_by_product(product_id)]


@router.get("/by-user/{user_id}", response_model=list[PolicyResponse])
async def list_policies_by_user(
    user_id: int,
    service: PolicyService = Depends(get_policy_service),
) -> list[PolicyResponse]:
    policies = await service.list_by_user(user_id)
    if policies is None:
        raise HTTPException(status_code=404, detail=f"User {user_id} not found")
    return [_to_response(p) for p in policies]


@router.get("/{policy_id}", response_model=PolicyResponse)
async def get_policy(
    policy_id: int,
    service: PolicyService = Depends(get_policy_service),
) -> PolicyResponse:
    policy = await service.get(policy_id)
    if not policy:
        raise HTTPException(status_code=404, detail=f"Policy {policy_id} not found")
    return _to_response(policy)


@router.post("", response_model=PolicyResponse, status_code=201)
async def create_policy(
    data: PolicyCreate,
    service: PolicyService = Depends(get_policy_service),
) -> PolicyResponse:
    """Create a policy for an existing product and user."""
    try:
        policy = await service.create(data)
    except (ReferenceNotFoundError, DuplicatePolicyNumberError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _to_response(policy)


@router.put("/{policy_id}", response_model=PolicyResponse)
async def update_policy(
    policy_id: int,
    data: PolicyUpdate,
    service: PolicyService = Depends(get_policy_service),
) -> PolicyResponse:
    try:
        policy = await service.update(policy_id, data)
    except ReferenceNotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    if not policy:
        raise HTTPException(status_code=404, detail=f"Policy {policy_id} not found")
    return _to_response(policy)


@router.delete("/{policy_id}", status_code=204, dependencies=[Depends(require_admin)])
async def delete_policy(
    policy_id: int,
    service: PolicyService = Depends(get_policy_service),
) -> None:
    """Delete a policy (admin only)."""
    if not await service.delete(policy_id):
        raise HTTPException(status_code=404, detail=f"Policy {policy_id} not found")
