import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.app import create_app
from src.app.services.retry import RetryPolicy
from src.app.services.session_store import SessionStore
from src.depends import get_session_store

# Short delays keep lock-contention retries fast under test
TEST_RETRY_POLICY = RetryPolicy(max_attempts=8, base_delay=0.01, max_delay=0.1)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def store(session_factory):
    return SessionStore(lambda: SqlAlchemyUnitOfWork(session_factory), TEST_RETRY_POLICY)


@pytest_asyncio.fixture
async def app(store):
    app = create_app(ApplicationConfig)
    app.dependency_overrides[get_session_store] = lambda: store
    return app


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def login(client):
    """Log a user in and return the token pair"""

    async def _login(user_id: str = "user-1", headers=None):
        response = await client.post("/auth/login", json={"user_id": user_id}, headers=headers)
        assert response.status_code == 200
        return response.json()

    return _login
