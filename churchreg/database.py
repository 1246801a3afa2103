"""Registry database connection and session management."""

from collections.abc import AsyncGenerator
from typing import Any
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from churchreg.config import settings


def engine_options(url: str) -> tuple[str, dict[str, Any]]:
    """Split a configured URL into an engine URL and create_async_engine kwargs.

    asyncpg rejects ``sslmode`` in the query string, so it is moved into
    ``connect_args``. SQLite engines get ``NullPool``: every checkout opens a
    fresh aiosqlite connection bound to the running event loop.
    """
    kwargs: dict[str, Any] = {}
    connect_args: dict[str, Any] = {}
    if "sslmode=" in url or "ssl=" in url:
        parsed = urlparse(url)
        query = parse_qs(parsed.query)
        mode = (query.pop("sslmode", None) or query.pop("ssl", None) or ["require"])[0]
        query.pop("ssl", None)
        url = urlunparse(parsed._replace(query=urlencode(query, doseq=True)))
        connect_args["ssl"] = mode
    if url.startswith("sqlite"):
        kwargs["poolclass"] = NullPool
    if connect_args:
        kwargs["connect_args"] = connect_args
    return url, kwargs


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for the registry database."""

    pass


_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Return the process-wide registry engine, creating it on first use."""
    global _engine, _session_maker
    if _engine is None:
        url, kwargs = engine_options(settings.database_url)
        _engine = create_async_engine(url, echo=settings.log_level == "DEBUG", **kwargs)
        _session_maker = async_sessionmaker(
            _engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )
    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    get_engine()
    assert _session_maker is not None
    return _session_maker


async def dispose_engine() -> None:
    """Dispose the registry engine; the next get_engine() call rebuilds it."""
    global _engine, _session_maker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_maker = None


async def init_db() -> None:
    """Create registry tables without Alembic (dev/test only)."""
    import churchreg.models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for database sessions."""
    async with get_session_maker()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
