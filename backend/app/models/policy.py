"""Insurance policy model."""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel, as_utc, utcnow

if TYPE_CHECKING:
    from app.models.product import Product
    from app.models.user import User


class Policy(BaseModel):
    """A policy issued under a product to a holder, owned by a user."""

    __tablename__ = "policies"

    policy_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    holder_name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    premium: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    product: Mapped["Product"] = relationship("Product", back_populates="policies", lazy="selectin")
    user: Mapped["User"] = relationship("User", lazy="selectin")

    @property
    def is_active(self) -> bool:
        """Whether the current time falls inside the coverage window."""
        now = utcnow()
        return as_utc(self.start_date) <= now <= as_utc(self.end_date)

    def __repr__(self) -> str:
        return f"<Policy {self.policy_number}>"
