"""REST API for insurance products."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_claims, require_admin
from app.core.database import get_db
from app.models.product import Product
from app.schemas.product import (
    FeatureResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from app.services.product import CreatorNotFoundError, ProductInUseError, ProductService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])


def get_product_service(db: AsyncSession = Depends(get_db)) -> ProductService:
    return ProductService(db)


def _to_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        name=product.name,
        price=float(product.price),
        is_active=product.is_active,
        created_by_user_id=product.created_by_user_id,
        created_by_username=product.created_by_user.username,
        created_at=product.created_at,
        updated_at=product.updated_at,
        features=[FeatureResponse.model_validate(f) for f in product.features],
    )


@router.get("", response_model=list[ProductResponse])
async def list_products(
    service: ProductService = Depends(get_product_service),
) -> list[ProductResponse]:
    """List all products with their features."""
    return [_to_response(p) for p in await service.list_all()]


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    product = await service.get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return _to_response(product)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=201,
    dependencies=[Depends(get_current_claims)],
)
async def create_product(
    data: ProductCreate,
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    """Create a product, optionally with features."""
    try:
        product = await service.create(data)
    except CreatorNotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _to_response(product)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    dependencies=[Depends(get_current_claims)],
)
async def update_product(
    product_id: int,
    data: ProductUpdate,
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    product = await service.update(product_id, data)
    if not product:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return _to_response(product)


@router.delete("/{product_id}", status_code=204, dependencies=[Depends(require_admin)])
async def delete_product(
    product_id: int,
    service: ProductService = Depends(get_product_service),
) -> None:
    """Delete a product (admin only). Refused while policies reference it."""
    try:
        deleted = await service.delete(product_id)
    except ProductInUseError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
