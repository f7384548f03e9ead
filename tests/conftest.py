"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Callable
from pathlib import Path

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.services.message_service import MessageService
from domain.services.presence_registry import PresenceRegistry
from domain.services.realtime_gateway import RealtimeGateway
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.password import BcryptPasswordHasher
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from tests.fakes import RecordingTransport, SignupFn

# Test database URL (SQLite in memory, one database per test)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

DEFAULT_PASSWORD = "secret123"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database with all tables."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], SQLAlchemyUnitOfWork]:
    """UoW factory bound to the test database."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def password_hasher() -> BcryptPasswordHasher:
    """Cheap bcrypt cost for tests."""
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def test_user() -> TokenUser:
    return TokenUser(email="test@example.com", display_name="Test User")


@pytest.fixture
def auth_token(auth_provider: JWTAuthProvider, test_user: TokenUser) -> str:
    """Create auth token for test user."""
    return auth_provider.create_token(test_user)


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def gateway(
    transport: RecordingTransport,
    auth_provider: JWTAuthProvider,
    uow_factory: Callable[[], SQLAlchemyUnitOfWork],
) -> RealtimeGateway:
    """Gateway over the test database that records deliveries instead of sending them."""
    return RealtimeGateway(
        registry=PresenceRegistry(),
        transport=transport,
        auth_provider=auth_provider,
        uow_factory=uow_factory,
        message_service=MessageService(uow_factory),
    )


@pytest.fixture
def app(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork],
    auth_provider: JWTAuthProvider,
    password_hasher: BcryptPasswordHasher,
    gateway: RealtimeGateway,
) -> FastAPI:
    """
    Application wired to the test database.

    - Overrides the UoW factory so every service uses the in-memory database
    - Overrides auth provider and password hasher with test instances
    - Replaces the realtime gateway with one using the recording transport
    """
    from api.dependencies.auth import get_auth_provider
    from api.v1.dependencies import get_password_hasher, get_uow_factory
    from main import create_app

    app = create_app()
    app.state.gateway = gateway
    app.dependency_overrides[get_uow_factory] = lambda: uow_factory
    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    app.dependency_overrides[get_password_hasher] = lambda: password_hasher
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def authenticated_client(
    app: FastAPI, auth_headers: dict[str, str]
) -> AsyncGenerator[AsyncClient, None]:
    """Client sending the test user's bearer token (the user has no account row)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=auth_headers
    ) as c:
        yield c


@pytest.fixture
def signup(client: AsyncClient) -> SignupFn:
    """Sign a user up through the API and return their auth headers."""

    async def _signup(
        email: str, name: str | None = None, password: str = DEFAULT_PASSWORD
    ) -> dict[str, str]:
        response = await client.post(
            "/api/v1/auth/signup",
            json={"email": email, "password": password, "name": name or email.split("@")[0]},
        )
        assert response.status_code == 201, response.json()
        return {"Authorization": f"Bearer {response.json()['data']['token']}"}

    return _signup
