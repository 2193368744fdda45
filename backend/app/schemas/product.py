"""Pydantic schemas for Product API."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class FeatureCreate(BaseModel):
    """Schema for a feature created together with its product."""

    title: str = Field(..., min_length=1, max_length=100)
    detail: str = Field(..., min_length=1, max_length=500)


class ProductCreate(BaseModel):
    """Schema for creating a product (features optional)."""

    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2)
    is_active: bool = True
    created_by_user_id: int
    features: list[FeatureCreate] = []


class ProductUpdate(BaseModel):
    """Schema for updating a product. Features are left untouched."""

    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2)
    is_active: bool


class FeatureResponse(BaseModel):
    """Schema for feature response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    detail: str
    product_id: int
    created_at: datetime


class ProductResponse(BaseModel):
    """Schema for product response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: float
    is_active: bool
    created_by_user_id: int
    created_by_username: str
    created_at: datetime
    updated_at: datetime | None
    features: list[FeatureResponse] = []
