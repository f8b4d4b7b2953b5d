"""Pytest configuration for all tests."""

from typing import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from smsgate.core.config import Settings, get_settings
from smsgate.domain.entities.user import UserRole
from smsgate.infrastructure.auth.jwt_service import JWTService
from smsgate.infrastructure.auth.password_hasher import hash_password
from smsgate.infrastructure.persistence import models  # noqa: F401
from smsgate.infrastructure.persistence.database import Base, get_db_session
from smsgate.infrastructure.persistence.models import UserModel
from smsgate.infrastructure.services import AccessLogRecorder

TEST_SECRET_KEY = "test-secret-key-that-is-long-enough-for-hs256"
TEST_PASSWORD = "CorrectHorse42!"


def make_settings(**overrides) -> Settings:
    """Build settings for tests without reading .env."""
    values = {
        "environment": "testing",
        "secret_key": TEST_SECRET_KEY,
        "database_url": "sqlite+aiosqlite:///:memory:",
        "registration_mode": "open",
        "turnstile_secret_key": None,
        "log_format": "console",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    """Build settings with overrides, e.g. ``settings_factory(registration_mode="invite_only")``."""
    return make_settings


@pytest.fixture
def user_password() -> str:
    """Plain-text password of users built by ``make_user``."""
    return TEST_PASSWORD


@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


@pytest.fixture
def jwt_service(test_settings: Settings) -> JWTService:
    return JWTService.from_settings(test_settings)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def app():
    """The FastAPI application, with overrides cleared afterwards."""
    from smsgate.infrastructure.api.app import app

    yield app
    app.dependency_overrides = {}


@pytest_asyncio.fixture
async def client(app, db_session: AsyncSession, test_settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden database and settings dependencies."""
    from smsgate.infrastructure.api.dependencies import get_access_log_recorder

    recorder = AccessLogRecorder(async_sessionmaker(bind=db_session.bind), enabled=False)

    app.dependency_overrides[get_db_session] = lambda: db_session
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_access_log_recorder] = lambda: recorder

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


UserFactory = Callable[..., Awaitable[UserModel]]


@pytest.fixture
def make_user(db_session: AsyncSession) -> UserFactory:
    """Factory creating committed users."""

    async def _make_user(
        email: str,
        role: UserRole = UserRole.REGULAR,
        is_banned: bool = False,
        name: str = "Test User",
        password: str = TEST_PASSWORD,
    ) -> UserModel:
        user = UserModel(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role.value,
            is_banned=is_banned,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest_asyncio.fixture
async def admin_user(make_user: UserFactory) -> UserModel:
    return await make_user("admin@example.com", role=UserRole.ADMIN, name="Admin")


@pytest_asyncio.fixture
async def regular_user(make_user: UserFactory) -> UserModel:
    return await make_user("user@example.com", name="Regular")


@pytest.fixture
def admin_token(admin_user: UserModel, jwt_service: JWTService) -> str:
    return jwt_service.create_access_token(
        user_id=admin_user.id, email=admin_user.email, role=admin_user.role
    )


@pytest.fixture
def regular_token(regular_user: UserModel, jwt_service: JWTService) -> str:
    return jwt_service.create_access_token(
        user_id=regular_user.id, email=regular_user.email, role=regular_user.role
    )


@pytest.fixture
def admin_headers(admin_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def regular_headers(regular_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {regular_token}"}
