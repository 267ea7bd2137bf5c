import os
import uuid
from collections.abc import AsyncGenerator, Iterator
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from restaunax.core.auth import SessionClaims, hash_password, issue_session_token
from restaunax.core.config import settings
from restaunax.models import Account, User
from restaunax.models.base import Base

# Set TEST_DATABASE_URL to run against PostgreSQL, e.g.
# postgresql+asyncpg://restaunax_user:pw@localhost:5432/restaunax_test
# Default: a throwaway SQLite file per test.
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "")

# Security: test-only secrets. Production reads real secrets from env.
TEST_AUTH_SECRET = "test-secret-key-that-is-at-least-32-characters-long"  # nosec B105  # gitleaks:allow
TEST_API_KEY = "test-api-key-for-service-callers"  # nosec B105  # gitleaks:allow
TEST_PASSWORD = "secret123"  # nosec B105

# Fixed ids (consistent across tests for predictable auth)
TEST_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
TEST_ACCOUNT_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")
USER_B_ID = uuid.UUID("00000000-0000-0000-0000-000000000099")
ACCOUNT_B_ID = uuid.UUID("00000000-0000-0000-0000-000000000098")


def create_test_token(
    user_id: uuid.UUID = TEST_USER_ID,
    *,
    email: str = "ana@example.com",
    account_id: uuid.UUID | None = TEST_ACCOUNT_ID,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed session token for test authentication.

    Args:
        user_id: User UUID to encode in the sub claim.
        email: Email claim.
        account_id: Account claim.
        expires_delta: Time until expiration. Defaults to 1 hour.

    Returns:
        Encoded token string.
    """
    return issue_session_token(
        SessionClaims(user_id=user_id, email=email, account_id=account_id),
        secret=TEST_AUTH_SECRET,
        expires_delta=expires_delta or timedelta(hours=1),
    )


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def create_account_with_owner(
    db: AsyncSession,
    *,
    user_id: uuid.UUID | None = None,
    account_id: uuid.UUID | None = None,
    name: str = "Ana",
    email: str = "ana@example.com",
    password: str = TEST_PASSWORD,
    verified: bool = True,
) -> tuple[User, Account]:
    """Insert an owner user and its account, linked both ways, and commit."""
    user = User(
        id=user_id or uuid.uuid4(),
        name=name,
        email=email,
        password_hash=hash_password(password),
        email_verified=datetime.now(UTC) if verified else None,
    )
    db.add(user)
    await db.flush()
    account = Account(
        id=account_id or uuid.uuid4(),
        name=f"{name}'s Restaurant",
        owner_id=user.id,
    )
    db.add(account)
    await db.flush()
    user.account_id = account.id
    await db.commit()
    return user, account


async def add_member(
    db: AsyncSession,
    account: Account,
    *,
    name: str = "Sam",
    email: str = "sam@example.com",
    password: str = TEST_PASSWORD,
) -> User:
    """Insert a verified non-owner member of an account and commit."""
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        email_verified=datetime.now(UTC),
        account_id=account.id,
    )
    db.add(user)
    await db.commit()
    return user


# =============================================================================
# Database Fixtures
# =============================================================================


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Create test database engine with a fresh schema."""
    url = TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    is_sqlite = url.startswith("sqlite")

    engine = create_async_engine(url, echo=False, poolclass=NullPool)
    if is_sqlite:
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    if not is_sqlite:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


# =============================================================================
# Data Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Verified owner of TEST_ACCOUNT_ID ("Ana's Restaurant")."""
    user, _ = await create_account_with_owner(
        db_session, user_id=TEST_USER_ID, account_id=TEST_ACCOUNT_ID
    )
    return user


@pytest_asyncio.fixture
async def test_account(db_session: AsyncSession, test_user: User) -> Account:
    account = await db_session.get(Account, test_user.account_id)
    assert account is not None
    return account


@pytest_asyncio.fixture
async def user_b(db_session: AsyncSession) -> User:
    """Owner of a second account for cross-tenant isolation tests."""
    user, _ = await create_account_with_owner(
        db_session,
        user_id=USER_B_ID,
        account_id=ACCOUNT_B_ID,
        name="Bruno",
        email="bruno@example.com",
    )
    return user


# =============================================================================
# API Test Fixtures
# =============================================================================


@pytest.fixture
def app(session_factory):
    """FastAPI app with get_db bound to the test database."""
    from restaunax.core.database import get_db
    from restaunax.main import app as fastapi_app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = override_get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def unauthenticated_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client without credentials."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def client(app, test_user) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client authenticated as TEST_USER_ID (session caller)."""
    token = create_test_token(
        test_user.id, email=test_user.email, account_id=test_user.account_id
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=bearer(token)
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def client_user_b(app, user_b) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client authenticated as USER_B_ID for cross-tenant tests."""
    token = create_test_token(
        user_b.id, email=user_b.email, account_id=user_b.account_id
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=bearer(token)
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def service_client(app) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client holding the shared API key (service caller)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"x-api-key": TEST_API_KEY},
    ) as ac:
        yield ac


# =============================================================================
# Autouse Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def test_settings() -> Iterator[None]:
    """Pin secrets, environment and a cheap bcrypt cost for every test."""
    original = {
        "auth_secret": settings.auth_secret,
        "api_key": settings.api_key,
        "environment": settings.environment,
        "bcrypt_rounds": settings.bcrypt_rounds,
        "resend_api_key": settings.resend_api_key,
    }
    settings.auth_secret = SecretStr(TEST_AUTH_SECRET)
    settings.api_key = SecretStr(TEST_API_KEY)
    settings.environment = "development"
    # Minimum bcrypt cost; production default is 12
    settings.bcrypt_rounds = 4
    settings.resend_api_key = SecretStr("")

    yield

    for name, value in original.items():
        setattr(settings, name, value)


@pytest.fixture(autouse=True)
def email_outbox() -> Iterator[AsyncMock]:
    """Capture verification emails instead of calling Resend.

    Yields:
        The AsyncMock standing in for send_verification_email; returns True.
        Tests read the plain token from ``call_args.kwargs["token"]``.
    """
    with patch(
        "restaunax.services.account_service.send_verification_email",
        new=AsyncMock(return_value=True),
    ) as mock_send:
        yield mock_send


@pytest.fixture(autouse=True)
def disable_rate_limiting() -> Iterator[None]:
    """Switch the limiter off; test_rate_limiting.py turns it back on."""
    from restaunax.core.rate_limiting import limiter

    was_enabled = limiter.enabled
    limiter.enabled = False
    yield
    limiter.enabled = was_enabled

