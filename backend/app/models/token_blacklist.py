"""Blacklisted JWT tokens - survives process restarts."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.models.base import utcnow


class BlacklistedToken(Base):
    """A revoked JWT identified by its JTI claim.

    Entries are created on logout, never updated, and deleted once
    expires_at has passed (or together with their user).
    """

    __tablename__ = "blacklisted_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    # Full token kept for audit only; lookups always go through token_id
    token: Mapped[str] = mapped_column(Text, nullable=False)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    blacklisted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    reason: Mapped[str] = mapped_column(String(255), nullable=False, default="Logout")

    def __repr__(self) -> str:
        return f"<BlacklistedToken {self.token_id} (user_id={self.user_id})>"
