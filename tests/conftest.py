# tests/conftest.py
import os

import httpx
import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Environment first: proximity.db builds its engine at import time
load_dotenv(".env.test", override=False)
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["TESTING"] = "1"
os.environ.pop("OPENAI_API_KEY", None)

from proximity import db  # noqa: E402
from proximity.api import deps  # noqa: E402
from proximity.core.config import get_settings  # noqa: E402
from proximity.main import create_app  # noqa: E402
from proximity.models import Base  # noqa: E402
from proximity.services.slowmode import SlowmodeRegistry  # noqa: E402
from tests.factories import FAR, NEAR, ORIGIN, add_user  # noqa: E402

get_settings.cache_clear()


# ==== Engine / Schema ====
@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    # One SQLite file per test; NullPool avoids sharing connections across loops
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield eng
    finally:
        await eng.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function", name="session")
async def _session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
def slowmode_registry() -> SlowmodeRegistry:
    return SlowmodeRegistry()


@pytest.fixture
def nominatim():
    """Handler and request log behind the MockTransport used for geocoding."""

    def _default(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[])

    return {"handler": _default, "calls": []}


# ==== FastAPI dependency overrides ====
@pytest.fixture
def app(session_factory, slowmode_registry, nominatim, monkeypatch):
    # readyz opens its own session from db.SessionLocal
    monkeypatch.setattr(db, "SessionLocal", session_factory)
    application = create_app()

    async def override_get_session():
        async with session_factory() as s:
            yield s

    async def override_http_client():
        def _handle(request: httpx.Request) -> httpx.Response:
            nominatim["calls"].append(request)
            return nominatim["handler"](request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(_handle)) as client:
            yield client

    application.dependency_overrides[deps.get_async_session] = override_get_session
    application.dependency_overrides[deps.get_http_client] = override_http_client
    application.dependency_overrides[deps.get_slowmode_registry] = lambda: slowmode_registry
    application.dependency_overrides[deps.get_llm_client] = lambda: None
    try:
        yield application
    finally:
        application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def app_client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ==== Seed ====
@pytest_asyncio.fixture
async def users(session):
    """alice at the origin, bob next door, carol ~69 mi away, dave without a location."""
    alice = await add_user(
        session,
        email="alice@example.com",
        full_name="Alice",
        location=ORIGIN,
        username="alice",
        interests=["garage_sales", "lost_found_pets"],
    )
    bob = await add_user(
        session, email="bob@example.com", full_name="Bob", location=NEAR, username="bobby"
    )
    carol = await add_user(
        session, email="carol@example.com", full_name="Carol", location=FAR, username="carol"
    )
    dave = await add_user(session, email="dave@example.com", full_name="Dave")
    return {"alice": alice, "bob": bob, "carol": carol, "dave": dave}
