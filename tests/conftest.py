"""Pytest fixtures for testing."""
import os
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from core.namespaces import NamespaceRegistry
from models import Base, Node, User
from services import node_service

TEST_DATABASE_URL = 'sqlite+aiosqlite:///:memory:'


@pytest.fixture(scope='session')
def database_url() -> str:
    """
    Point application settings at an in-memory database.

    This must be set before any app imports that trigger Settings validation.
    """
    os.environ['DATABASE_URL'] = TEST_DATABASE_URL
    return TEST_DATABASE_URL


@pytest.fixture
async def async_engine(database_url: str) -> AsyncGenerator[AsyncEngine]:
    """Create a fresh in-memory database per test."""
    engine = create_async_engine(database_url, echo=False, poolclass=StaticPool)

    @event.listens_for(engine.sync_engine, 'connect')
    def _enable_foreign_keys(dbapi_connection, _connection_record) -> None:  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create an async session on the per-test database."""
    session_factory = async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session


@pytest.fixture
def registry() -> NamespaceRegistry:
    """Namespace registry with the built-in prefixes and association types."""
    return NamespaceRegistry()


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a user that owns test nodes."""
    user = User(username='jdoe', first_name='Jane', last_name='Doe', email='jdoe@test.com')
    db_session.add(user)
    await db_session.flush()
    return user


@pytest.fixture
async def root(db_session: AsyncSession, test_user: User) -> Node:
    """Create the repository root."""
    return await node_service.create_node(
        db_session,
        'Company Home',
        node_type=node_service.FOLDER_TYPE,
        is_root=True,
        created_by_id=test_user.id,
    )


@pytest.fixture
async def client(
    database_url: str,  # noqa: ARG001
    db_session: AsyncSession,
) -> AsyncGenerator[AsyncClient]:
    """Create a test client with database session override."""
    # Clear the settings cache so it picks up DATABASE_URL from environment
    from core.config import get_settings

    get_settings.cache_clear()

    from api.main import app
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_async_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url='http://test',
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
