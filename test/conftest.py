"""
Pytest configuration and fixtures for Syncora tests
"""

import os
import sys
from collections.abc import AsyncGenerator

# Configure the app for tests before anything from syncora is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ["ENVIRONMENT"] = "test"
os.environ["GEMINI_API_KEY"] = ""
os.environ["GOOGLE_CLIENT_ID"] = ""
os.environ["GOOGLE_CLIENT_SECRET"] = ""
os.environ["REDIS_URL"] = ""

import pyotp  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH120

from syncora.auth import hash_password  # noqa: E402
from syncora.database import Base, get_db  # noqa: E402
from syncora.main import create_app  # noqa: E402
from syncora.middleware.rate_limit import limiter  # noqa: E402
from syncora.models.user import User  # noqa: E402
from syncora.services.gemini_service import GeminiService, get_gemini_service  # noqa: E402
from syncora.services.pending_auth import PendingAuthRegistry  # noqa: E402
from syncora.utils.session import InMemorySessionManager  # noqa: E402

TEST_PASSWORD = "pw1"


class FakeClock:
    """Manually advanced clock for expiry tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="function")
async def session_factory():
    """
    Fresh in-memory database for one test.

    StaticPool keeps a single connection so the app and the fixtures see
    the same data. Yields the session factory bound to it.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture(scope="function")
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    limiter.reset()
    limiter.enabled = True
    yield
    limiter.reset()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock: FakeClock) -> PendingAuthRegistry:
    return PendingAuthRegistry(ttl_seconds=300, clock=clock)


@pytest.fixture
def session_manager() -> InMemorySessionManager:
    return InMemorySessionManager()


@pytest.fixture
def gemini() -> GeminiService:
    """AI client with no API key: every call takes its offline path."""
    return GeminiService(api_key="")


@pytest.fixture
def app(session_factory, registry, session_manager, gemini):
    """Application wired to the test database and in-process state."""
    application = create_app()

    async def _override_get_db():
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db] = _override_get_db
    application.dependency_overrides[get_gemini_service] = lambda: gemini

    # ASGITransport does not run the lifespan, so install its state directly
    application.state.pending_auth = registry
    application.state.session_manager = session_manager

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


async def create_user(db: AsyncSession, email: str, password: str | None = TEST_PASSWORD, **fields) -> User:
    user = User(
        email=email,
        hashed_password=hash_password(password) if password else None,
        name=email.split("@")[0],
        **fields,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def test_user(test_db: AsyncSession) -> User:
    """Password-only user a@x.com / pw1."""
    return await create_user(test_db, "a@x.com")


@pytest.fixture
def totp_secret() -> str:
    return pyotp.random_base32()


@pytest.fixture
async def two_factor_user(test_db: AsyncSession, totp_secret: str) -> User:
    """User with 2FA enabled and a known secret."""
    return await create_user(test_db, "b@x.com", two_factor_secret=totp_secret, two_factor_enabled=True)


@pytest.fixture
async def authenticated_client(client: AsyncClient, test_user: User) -> AsyncClient:
    """Client holding a session cookie for test_user."""
    response = await client.post("/auth/login", json={"email": test_user.email, "password": TEST_PASSWORD})
    assert response.status_code == 200
    return client
