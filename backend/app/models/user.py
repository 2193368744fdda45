"""User model for authentication and ownership."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


class UserRole(str, enum.Enum):
    """Roles carried in the session token's role claim."""

    CUSTOMER = "Customer"
    ADMIN = "Admin"


class User(BaseModel):
    """Application user.

    Credentials are verified against password_hash (Argon2id). Blacklisted
    tokens reference users but are not navigable from here.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SAEnum(
            UserRole,
            name="user_role",
            native_enum=False,
            values_callable=lambda roles: [r.value for r in roles],
        ),
        default=UserRole.CUSTOMER,
        nullable=False,
    )

    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<User {self.username} ({self.role.value})>"
