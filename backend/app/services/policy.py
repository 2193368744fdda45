"""Policy service - business logic for insurance policies."""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.base import as_utc
from app.models.policy import Policy
from app.models.product import Product
from app.models.user import User
from app.schemas.policy import PolicyCreate, PolicyUpdate

logger = logging.getLogger(__name__)


class PolicyError(Exception):
    """Base policy error."""

    pass


class ReferenceNotFoundError(PolicyError):
    """The referenced product or user does not exist."""

    pass


class DuplicatePolicyNumberError(PolicyError):
    """Another policy already uses this number."""

    pass


class PolicyService:
    """Service for managing policies."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _query(self):
        return (
            select(Policy)
            .options(selectinload(Policy.product), selectinload(Policy.user))
            .order_by(Policy.created_at.desc(), Policy.id.desc())
        )

    async def list_all(self) -> list[Policy]:
        """List all policies, newest first."""
        result = await self.db.execute(self._query())
        return list(result.scalars().all())

    async def list_by_product(self, product_id: int) -> list[Policy]:
        result = await self.db.execute(self._query().where(Policy.product_id == product_id))
        return list(result.scalars().all())

    async def list_by_user(self, user_id: int) -> list[Policy] | None:
        """List a user's policies, or None if the user does not exist."""
        if await self.db.get(User, user_id) is None:
            return None
        result = await self.db.execute(self._query().where(Policy.user_id == user_id))
        return list(result.scalars().all())

    async def list_active(self) -> list[Policy]:
        """Policies whose coverage window contains the current time."""
        now = datetime.now(UTC)
        result = await self.db.execute(
            self._query().where(Policy.start_date <= now, Policy.end_date >= now)
        )
        return list(result.scalars().all())

    async def get(self, policy_id: int) -> Policy | None:
        result = await self.db.execute(
            self._query()
            .where(Policy.id == policy_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create(self, data: PolicyCreate) -> Policy:
        """Create a policy after checking its references and number."""
        await self._check_references(data.product_id, data.user_id)

        existing = await self.db.execute(
            select(Policy.id).where(Policy.policy_number == data.policy_number)
        )
        if existing.first() is not None:
            raise DuplicatePolicyNumberError("Policy number already exists")

        policy = Policy(
            policy_number=data.policy_number,
            holder_name=data.holder_name,
            start_date=as_utc(data.start_date),
            end_date=as_utc(data.end_date),
            premium=data.premium,
            product_id=data.product_id,
            user_id=data.user_id,
        )
        self.db.add(policy)
        await self.db.flush()

        logger.info(f"Created policy {policy.policy_number} for user {policy.user_id}")
        created = await self.get(policy.id)
        assert created is not None
        return created

    async def update(self, policy_id: int, data: PolicyUpdate) -> Policy | None:
        policy = await self.get(policy_id)
        if policy is None:
            return None

        await self._check_references(data.product_id, data.user_id)

        policy.holder_name = data.holder_name
        policy.start_date = as_utc(data.start_date)
        policy.end_date = as_utc(data.end_date)
        policy.premium = data.premium
        policy.product_id = data.product_id
        policy.user_id = data.user_id
        await self.db.flush()

        return await self.get(policy_id)

    async def delete(self, policy_id: int) -> bool:
        policy = await self.db.get(Policy, policy_id)
        if policy is None:
            return False
        await self.db.delete(policy)
        await self.db.flush()
        logger.info(f"Deleted policy {policy_id}")
        return True

    async def _check_references(self, product_id: int, user_id: int) -> None:
        if await self.db.get(Product, product_id) is None:
            raise ReferenceNotFoundError("Product not found")
        if await self.db.get(User, user_id) is None:
            raise ReferenceNotFoundError("User not found")
