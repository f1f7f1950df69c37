import socket
from collections.abc import AsyncGenerator, Iterator

import bcrypt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import settings
from app.core.rate_limiting import limiter
from app.models import Base, User
from app.providers import factory
from app.providers.email.mock_adapter import MockEmailProvider
from tests.fakes import InMemoryAuthStore

# Use separate test database
TEST_DATABASE_URL = (
    settings.database_url.rsplit("/", 1)[0] + f"/{settings.database_name}_test"
)

# Security: This is a test-only secret. Production uses a real secret from env.
TEST_AUTH_SECRET = "test-secret-key-that-is-at-least-32-characters-long"  # nosec B105  # gitleaks:allow

TEST_PASSWORD = "admin123"  # nosec B105  # gitleaks:allow
TEST_EMAIL = "admin@s2design.com"
TEST_BCRYPT_ROUNDS = 4  # Low cost factor for fast tests


def hash_test_password(password: str = TEST_PASSWORD) -> str:
    """bcrypt hash with a low cost factor for fast tests."""
    return bcrypt.hashpw(
        password.encode(), bcrypt.gensalt(rounds=TEST_BCRYPT_ROUNDS)
    ).decode()


def _is_postgres_available() -> bool:
    """Check if PostgreSQL is accepting connections.

    Returns:
        True if PostgreSQL is reachable on the configured port, False otherwise.
    """
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(1)
        result = sock.connect_ex((settings.database_host, settings.database_port))
        sock.close()
        return result == 0
    except OSError:
        return False


# Check once at module load time
_POSTGRES_AVAILABLE = _is_postgres_available()


def skip_if_no_postgres() -> None:
    """Skip test if PostgreSQL is not available.

    Called by fixtures that require database connection.
    """
    if not _POSTGRES_AVAILABLE:
        pytest.skip(
            "PostgreSQL not available. Start database with: docker compose up -d"
        )


# =============================================================================
# Database Fixtures (repository tests)
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create test database engine.

    Skips test if PostgreSQL is not available (e.g., Docker not running).
    """
    skip_if_no_postgres()

    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create the admin user in the test database."""
    user = User(
        username="admin",
        password_hash=hash_test_password(),
        email=TEST_EMAIL,
        role="admin",
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


# =============================================================================
# In-memory Fixtures (service and API tests)
# =============================================================================


@pytest.fixture
def mock_email() -> Iterator[MockEmailProvider]:
    """Mock email provider injected into the factory singleton.

    Yields:
        MockEmailProvider recording every message.
    """
    mock = MockEmailProvider()
    factory._email_provider = mock

    yield mock

    factory.reset_providers()


@pytest_asyncio.fixture
async def memory_store() -> InMemoryAuthStore:
    """In-memory store seeded with the admin account."""
    store = InMemoryAuthStore()
    await store.users.create(
        username="admin",
        password_hash=hash_test_password(),
        email=TEST_EMAIL,
        role="admin",
    )
    return store


@pytest_asyncio.fixture
async def client(
    memory_store: InMemoryAuthStore,
    mock_email: MockEmailProvider,  # noqa: ARG001 - injected via factory
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the in-memory store and mock email.

    Sets up:
    - get_auth_store override returning ``memory_store``
    - Test signing secret and low bcrypt cost
    - httpx.AsyncClient with ASGI transport (no lifespan, no database)

    Yields:
        Configured AsyncClient.
    """
    from app.api.deps import get_auth_store
    from app.main import app

    app.dependency_overrides[get_auth_store] = lambda: memory_store

    original_auth_secret = settings.auth_secret
    original_bcrypt_rounds = settings.bcrypt_rounds
    settings.auth_secret = SecretStr(TEST_AUTH_SECRET)
    settings.bcrypt_rounds = TEST_BCRYPT_ROUNDS

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    settings.auth_secret = original_auth_secret
    settings.bcrypt_rounds = original_bcrypt_rounds
    app.dependency_overrides.clear()


# =============================================================================
# Autouse Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def disable_rate_limiting() -> Iterator[None]:
    """Disable slowapi between tests; rate limit tests re-enable it."""
    original = limiter.enabled
    limiter.enabled = False
    limiter.reset()

    yield

    limiter.enabled = original
    limiter.reset()
