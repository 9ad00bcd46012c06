"""
Test infrastructure for the Newsroom API.

Strategy
--------
- SQLite in-memory via aiosqlite, shared through StaticPool so every
  session sees the same database.
- pysqlite's implicit transaction handling is switched off and BEGIN is
  emitted explicitly, otherwise SAVEPOINT (used by the bookmark toggle)
  does not nest properly on SQLite.
- The app's get_db dependency is overridden with the test session factory.
- Tables are created before each test and dropped after.
- Redis is disabled by nulling the cache client; reads miss and writes
  are no-ops.
- Tokens are minted with the application's own codec, so the gates under
  test verify exactly what production would.  The signing key is set in
  the environment before the application settings are first imported.
- Tests that exercise the cache swap in ``FakeRedis`` through the
  ``fake_redis`` fixture.
"""
import fnmatch
import os

os.environ.setdefault("SECRET_KEY", "test-suite-signing-key-0123456789abcdef")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from newsroom.auth.tokens import Principal, Role, TokenCodec, get_token_codec
from newsroom.cache import cache
from newsroom.database import Base, get_db
from newsroom.main import app

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine_test.sync_engine, "connect")
def _disable_pysqlite_transactions(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine_test.sync_engine, "begin")
def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")


async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def session_factory() -> async_sessionmaker:
    """The test session factory, for tests that need a second, independent session."""
    return async_session_test


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    async with async_session_test() as session:
        yield session


@pytest.fixture
def codec() -> TokenCodec:
    return get_token_codec()


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    cache._redis = None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class FakeRedis:
    """Dict-backed stand-in for the few ``redis.asyncio`` calls ``ArticleCache`` makes."""

    def __init__(self):
        self.store: dict[str, str] = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value

    async def delete(self, *keys):
        for key in keys:
            self.store.pop(key, None)

    async def scan_iter(self, match="*"):
        for key in list(self.store):
            if fnmatch.fnmatchcase(key, match):
                yield key

    async def aclose(self):
        pass


@pytest.fixture
def fake_redis(async_client: AsyncClient, monkeypatch) -> FakeRedis:
    """Enable the article cache for one test, backed by an in-memory store."""
    fake = FakeRedis()
    monkeypatch.setattr(cache, "_redis", fake)
    return fake


@pytest.fixture
def make_user(async_client: AsyncClient, codec: TokenCodec):
    """
    Return an async factory that registers a user through the API and
    returns ``(user_id, headers)`` where *headers* carry a valid bearer
    token for that user.
    """

    async def _make_user(username: str, role: Role = Role.READER) -> tuple[int, dict]:
        resp = await async_client.post("/api/v1/users", json={
            "username": username,
            "email": f"{username}@example.com",
            "role": role.value,
        })
        assert resp.status_code == 201, resp.text
        user_id = resp.json()["id"]
        token = codec.issue(Principal(id=user_id, role=role))
        return user_id, {"Authorization": f"Bearer {token}"}

    return _make_user
