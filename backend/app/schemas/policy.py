"""Pydantic schemas for Policy API."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.base import as_utc


class PolicyBase(BaseModel):
    """Fields shared by create and update."""

    holder_name: str = Field(..., min_length=1, max_length=100)
    start_date: datetime
    end_date: datetime
    premium: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2)
    product_id: int
    user_id: int

    @model_validator(mode="after")
    def validate_dates(self) -> "PolicyBase":
        if as_utc(self.end_date) <= as_utc(self.start_date):
            raise ValueError("End date must be after start date")
        return self


class PolicyCreate(PolicyBase):
    """Schema for creating a policy."""

    policy_number: str = Field(..., min_length=1, max_length=50)


class PolicyUpdate(PolicyBase):
    """Schema for updating a policy. The policy number is immutable."""


class PolicyResponse(BaseModel):
    """Schema for policy response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    policy_number: str
    holder_name: str
    start_date: datetime
    end_date: datetime
    premium: float
    product_id: int
    product_name: str
    user_id: int
    username: str
    created_at: datetime
    updated_at: datetime | None
    is_active: bool
