"""Authentication service - credential storage and verification."""

import logging
from datetime import UTC, datetime

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

# Argon2 password hasher with recommended parameters
# Memory: 64 MiB, Time: 3 iterations, Parallelism: 4
ph = PasswordHasher(
    time_cost=3,
    memory_cost=65536,
    parallelism=4,
    hash_len=32,
    salt_len=16,
)

# Precomputed so unknown usernames cost the same as wrong passwords
_DUMMY_HASH = ph.hash("dummy-password-for-timing")


class AuthError(Exception):
    """Base authentication error."""

    pass


class InvalidCredentialsError(AuthError):
    """Invalid username or password."""

    pass


class UserExistsError(AuthError):
    """Email or username is already registered."""

    pass


def hash_password(password: str) -> str:
    """Hash a password using Argon2id."""
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash using constant-time comparison."""
    try:
        ph.verify(password_hash, password)
        return True
    except (VerifyMismatchError, InvalidHashError):
        return False


class AuthService:
    """Service for user registration and login."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_user_by_username(self, username: str) -> User | None:
        """Get user by username."""
        result = await self.session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: int) -> User | None:
        """Get user by ID."""
        return await self.session.get(User, user_id)

    async def register(
        self,
        email: str,
        username: str,
        password: str,
        role: UserRole = UserRole.CUSTOMER,
    ) -> User:
        """Create a new user.

        Raises UserExistsError if the email or username is taken.
        """
        result = await self.session.execute(
            select(User.email, User.username).where(
                or_(User.email == email, User.username == username)
            )
        )
        for existing_email, _ in result.all():
            if existing_email == email:
                raise UserExistsError("Email already registered")
            raise UserExistsError("Username already taken")

        user = User(
            email=email,
            username=username,
            password_hash=hash_password(password),
            role=role,
        )
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)

        logger.info(f"Registered user: {username} ({role.value})")
        return user

    async def authenticate(self, username: str, password: str) -> User:
        """Authenticate a user and return the user object.

        Raises InvalidCredentialsError for both "user not found" and
        "wrong password" to prevent user enumeration.
        """
        user = await self.get_user_by_username(username)

        if user is None:
            verify_password(password, _DUMMY_HASH)
            raise InvalidCredentialsError("Invalid username or password")

        if not verify_password(password, user.password_hash):
            raise InvalidCredentialsError("Invalid username or password")

        user.last_login_at = datetime.now(UTC)
        await self.session.commit()

        return user
