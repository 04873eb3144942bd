# proximity/db.py
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from proximity.core.config import get_settings

DATABASE_URL: str

engine: AsyncEngine
SessionLocal: async_sessionmaker[AsyncSession]


def _apply_async_scheme(database_url: str) -> str:
    if database_url.startswith("postgresql+psycopg://"):
        return database_url.replace("postgresql+psycopg://", "postgresql+asyncpg://", 1)
    if database_url.startswith("postgresql+psycopg2://"):
        return database_url.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


def _create_engine(database_url: str) -> AsyncEngine:
    url = make_url(database_url)
    connect_args = {}

    if url.get_backend_name() == "postgresql" and url.get_driver_name() == "asyncpg":
        query = dict(url.query)
        if "sslmode" in query:
            # asyncpg takes ssl=<mode> instead of sslmode
            connect_args["ssl"] = query.pop("sslmode")
        # asyncpg does not support channel_binding
        query.pop("channel_binding", None)
        url = url._replace(query=query)
        return create_async_engine(url, pool_pre_ping=True, connect_args=connect_args)

    return create_async_engine(url, connect_args=connect_args)


def configure_engine(database_url: str | None = None) -> None:
    """Configure SQLAlchemy engine and session factory."""

    global engine, SessionLocal, DATABASE_URL

    DATABASE_URL = database_url or get_settings().database_url
    engine = _create_engine(_apply_async_scheme(DATABASE_URL))
    SessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_async_session() -> AsyncSession:
    async with SessionLocal() as session:
        yield session


configure_engine()
