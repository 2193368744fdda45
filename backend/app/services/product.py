"""Product service - business logic for insurance products and their features."""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.policy import Policy
from app.models.product import Feature, Product
from app.models.user import User
from app.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class ProductError(Exception):
    """Base product error."""

    pass


class CreatorNotFoundError(ProductError):
    """The user named as creator does not exist."""

    pass


class ProductInUseError(ProductError):
    """The product still has policies referencing it."""

    pass


class ProductService:
    """Service for managing products."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _query(self):
        return select(Product).options(
            selectinload(Product.features),
            selectinload(Product.created_by_user),
        )

    async def list_all(self) -> list[Product]:
        """List all products, newest first."""
        result = await self.db.execute(self._query().order_by(Product.created_at.desc(), Product.id.desc()))
        return list(result.scalars().all())

    async def get(self, product_id: int) -> Product | None:
        """Get a product with its features and creator."""
        result = await self.db.execute(
            self._query()
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create(self, data: ProductCreate) -> Product:
        """Create a product together with any features supplied."""
        if await self.db.get(User, data.created_by_user_id) is None:
            raise CreatorNotFoundError("Creator user not found")

        product = Product(
            name=data.name,
            price=data.price,
            is_active=data.is_active,
            created_by_user_id=data.created_by_user_id,
            features=[Feature(title=f.title, detail=f.detail) for f in data.features],
        )
        self.db.add(product)
        await self.db.flush()

        logger.info(f"Created product {product.id}: {product.name}")
        created = await self.get(product.id)
        assert created is not None
        return created

    async def update(self, product_id: int, data: ProductUpdate) -> Product | None:
        """Update name, price and active flag."""
        product = await self.get(product_id)
        if product is None:
            return None

        product.name = data.name
        product.price = data.price
        product.is_active = data.is_active
        await self.db.flush()

        return await self.get(product_id)

    async def delete(self, product_id: int) -> bool:
        """Delete a product and its features.

        Raises ProductInUseError while policies still reference it.
        """
        product = await self.get(product_id)
        if product is None:
            return False

        result = await self.db.execute(
            select(func.count(Policy.id)).where(Policy.product_id == product_id)
        )
        if (result.scalar() or 0) > 0:
            raise ProductInUseError("Cannot delete product that has associated policies")

        await self.db.delete(product)
        await self.db.flush()
        logger.info(f"Deleted product {product_id}")
        return True
