"""Pytest configuration and fixtures for backend tests.

Database Handling:
- By default every test run gets a temporary SQLite file (via aiosqlite)
- Set TEST_DATABASE_URL to run against another database, e.g. PostgreSQL
  (postgresql+asyncpg://...)
"""

import os
import tempfile
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

# Set test environment variables before importing app modules
_test_db_dir = tempfile.mkdtemp(prefix="snic-tests-")
os.environ["DATABASE_URL"] = os.environ.get(
    "TEST_DATABASE_URL", f"sqlite+aiosqlite:///{_test_db_dir}/test.db"
)
os.environ["JWT_SECRET_KEY"] = "test-signing-key-that-is-long-enough-for-hs256"
os.environ["JWT_ISSUER"] = "snic-api"
os.environ["JWT_AUDIENCE"] = "snic-clients"

# Test user credentials
TEST_PASSWORD = "testpassword123"


# --- Database Fixtures ---


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create all tables on the application engine for one test."""
    from app.core.database import Base, engine
    from app.models import BlacklistedToken, Feature, Policy, Product, User  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables after test
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for testing."""
    from app.core.database import async_session_maker

    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with database override.

    The revoked-token middleware opens its own sessions, so it only sees
    rows that have been committed.
    """
    from app.core.database import get_db
    from app.main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    # Clean up
    app.dependency_overrides.clear()


# --- Tokens ---


@pytest.fixture
def token_issuer():
    """The issuer the application signs tokens with."""
    from app.main import app

    return app.state.token_issuer


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def bearer():
    """Build an Authorization header for a raw token."""
    return _bearer


# --- Test Factories ---


@pytest.fixture
def user_factory(db_session):
    """Factory for creating test users."""
    from app.models.user import User, UserRole
    from app.services.auth import hash_password

    counter = {"n": 0}

    async def _create_user(
        username: str | None = None,
        email: str | None = None,
        password: str = TEST_PASSWORD,
        role: UserRole = UserRole.CUSTOMER,
    ) -> User:
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            password_hash=hash_password(password),
            role=role,
        )
        db_session.add(user)
        await db_session.flush()
        await db_session.refresh(user)
        return user

    return _create_user


@pytest_asyncio.fixture
async def customer_user(user_factory):
    """Create a test customer."""
    return await user_factory(username="customer")


@pytest_asyncio.fixture
async def admin_user(user_factory):
    """Create a test admin user."""
    from app.models.user import UserRole

    return await user_factory(username="admin", role=UserRole.ADMIN)


@pytest.fixture
def customer_headers(customer_user, token_issuer) -> dict[str, str]:
    """Headers with a session token for the customer."""
    return _bearer(token_issuer.issue(customer_user).token)


@pytest.fixture
def admin_headers(admin_user, token_issuer) -> dict[str, str]:
    """Headers with a session token for the admin."""
    return _bearer(token_issuer.issue(admin_user).token)


@pytest.fixture
def product_factory(db_session, admin_user):
    """Factory for creating test products."""
    from app.models.product import Feature, Product

    async def _create_product(
        name: str = "Comprehensive Car Cover",
        price: Decimal = Decimal("1200.00"),
        features: list[tuple[str, str]] | None = None,
        **kwargs,
    ) -> Product:
        product = Product(
            name=name,
            price=price,
            is_active=kwargs.pop("is_active", True),
            created_by_user_id=kwargs.pop("created_by_user_id", admin_user.id),
            features=[Feature(title=t, detail=d) for t, d in (features or [])],
            **kwargs,
        )
        db_session.add(product)
        await db_session.flush()
        await db_session.refresh(product)
        return product

    return _create_product


@pytest.fixture
def policy_factory(db_session, customer_user, product_factory):
    """Factory for creating test policies."""
    from app.models.policy import Policy

    counter = {"n": 0}

    async def _create_policy(product=None, user=None, **kwargs) -> Policy:
        counter["n"] += 1
        if product is None:
            product = await product_factory()
        now = datetime.now(UTC)
        policy = Policy(
            policy_number=kwargs.pop("policy_number", f"POL-{counter['n']:04d}"),
            holder_name=kwargs.pop("holder_name", "Jane Holder"),
            start_date=kwargs.pop("start_date", now - timedelta(days=30)),
            end_date=kwargs.pop("end_date", now + timedelta(days=335)),
            premium=kwargs.pop("premium", Decimal("450.50")),
            product_id=product.id,
            user_id=(user or customer_user).id,
            **kwargs,
        )
        db_session.add(policy)
        await db_session.flush()
        await db_session.refresh(policy)
        return policy

    return _create_policy
