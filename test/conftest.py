# test/conftest.py
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# StaticPool keeps the in-memory DB alive across connections in one test.
TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(test_engine, expire_on_commit=False)

from blog_posts import main, store
from blog_posts.store import Base, StoreClient


@pytest_asyncio.fixture(scope="function")
async def db_session():
    """
    Creates a fresh in-memory database for each test function.
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestingSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def session_factory(db_session):
    return TestingSessionLocal


@pytest.fixture
def store_client(session_factory) -> StoreClient:
    return StoreClient(session_factory, page_size=64)


@pytest_asyncio.fixture(scope="function")
async def client(db_session):
    """
    FastAPI AsyncClient with the store pointed at the test session maker.

    The dependencies read `store.async_session` on every request, so
    patching the module attribute is enough.
    """
    original_store_session = store.async_session
    store.async_session = TestingSessionLocal

    transport = ASGITransport(app=main.app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    store.async_session = original_store_session


@pytest.fixture
def seed(db_session):
    """Returns a helper that stores posts with the given titles, in order."""

    async def _seed(*titles: str) -> None:
        await store.add_posts(list(titles), session_factory=TestingSessionLocal)

    return _seed
