"""Insurance product and feature models."""

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.policy import Policy
    from app.models.user import User


class Product(BaseModel):
    """An insurance product offered to customers.

    Features are owned by the product and deleted with it. Policies keep a
    RESTRICT reference, so a product with policies cannot be deleted.
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_by_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )

    created_by_user: Mapped["User"] = relationship("User", lazy="selectin")
    features: Mapped[list["Feature"]] = relationship(
        "Feature",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="Feature.id",
        lazy="selectin",
    )
    policies: Mapped[list["Policy"]] = relationship(
        "Policy",
        back_populates="product",
        passive_deletes="all",
    )

    def __repr__(self) -> str:
        return f"<Product {self.name}>"


class Feature(BaseModel):
    """A titled selling point of a product (e.g. "Roadside assistance")."""

    __tablename__ = "features"

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    detail: Mapped[str] = mapped_column(String(500), nullable=False)

    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    product: Mapped["Product"] = relationship("Product", back_populates="features")

    def __repr__(self) -> str:
        return f"<Feature {self.title} (product_id={self.product_id})>"
