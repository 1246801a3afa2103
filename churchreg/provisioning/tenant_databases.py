"""Physical per-client databases: create, drop, connect, build schema.

Each client owns one database named by its registry ``database_name``. On
PostgreSQL that is a real database on the registry's server, created and
dropped over an AUTOCOMMIT connection (neither statement may run inside a
transaction). On SQLite it is the file ``<tenant_database_dir>/<name>.db``.

Connections are never pooled across operations: every call builds a
``NullPool`` engine and disposes it on the way out.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncConnection, create_async_engine
from sqlalchemy.pool import NullPool

from churchreg.config import settings
from churchreg.database import engine_options
from churchreg.models import TenantBase
from churchreg.utils.naming import is_valid_database_name

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("postgresql", "sqlite")


class TenantDatabaseNotFound(LookupError):
    """The client's database does not exist."""


class TenantDatabaseManager:
    """Creates, drops and opens client databases next to the registry."""

    def __init__(self, registry_url: str, tenant_database_dir: str | None = None):
        url, kwargs = engine_options(registry_url)
        self.url: URL = make_url(url)
        self.backend = self.url.get_backend_name()
        if self.backend not in SUPPORTED_BACKENDS:
            raise ValueError(f"Unsupported database backend: {self.backend}")
        self._connect_args = kwargs.get("connect_args", {})
        self._sqlite_dir: Path | None = None
        if self.backend == "sqlite":
            if tenant_database_dir:
                self._sqlite_dir = Path(tenant_database_dir)
            elif self.url.database and self.url.database != ":memory:":
                self._sqlite_dir = Path(self.url.database).parent
            else:
                self._sqlite_dir = Path(".")

    def _check_name(self, database_name: str) -> None:
        if not is_valid_database_name(database_name):
            raise ValueError(f"Invalid database name: {database_name!r}")

    def sqlite_path(self, database_name: str) -> Path:
        if self._sqlite_dir is None:
            raise ValueError(f"No database files on the {self.backend} backend")
        return self._sqlite_dir / f"{database_name}.db"

    def url_for(self, database_name: str) -> URL:
        self._check_name(database_name)
        if self.backend == "sqlite":
            return self.url.set(database=str(self.sqlite_path(database_name)))
        return self.url.set(database=database_name)

    def _engine(self, url: URL, **kwargs):
        return create_async_engine(
            url, poolclass=NullPool, connect_args=self._connect_args, **kwargs
        )

    @asynccontextmanager
    async def _server_connection(self) -> AsyncIterator[AsyncConnection]:
        engine = self._engine(self.url, isolation_level="AUTOCOMMIT")
        try:
            async with engine.connect() as conn:
                yield conn
        finally:
            await engine.dispose()

    @asynccontextmanager
    async def connect(
        self, database_name: str, create: bool = False
    ) -> AsyncIterator[AsyncConnection]:
        """
        Open a connection to a client database.

        The caller commits. The engine is disposed on every exit path. A
        missing SQLite file raises TenantDatabaseNotFound unless ``create``.
        """
        url = self.url_for(database_name)
        if self.backend == "sqlite" and not create:
            if not self.sqlite_path(database_name).exists():
                raise TenantDatabaseNotFound(database_name)
        engine = self._engine(url)
        try:
            async with engine.connect() as conn:
                yield conn
        finally:
            await engine.dispose()

    async def database_exists(self, database_name: str) -> bool:
        self._check_name(database_name)
        if self.backend == "sqlite":
            return self.sqlite_path(database_name).exists()
        async with self._server_connection() as conn:
            result = await conn.execute(
                text("SELECT 1 FROM pg_database WHERE datname = :name"),
                {"name": database_name},
            )
            return result.scalar() is not None

    async def create_database(self, database_name: str) -> bool:
        """Create the database if it does not exist. Returns True if created."""
        self._check_name(database_name)
        if self.backend == "sqlite":
            path = self.sqlite_path(database_name)
            if path.exists():
                logger.warning(f"Database already exists: {database_name}")
                return False
            path.parent.mkdir(parents=True, exist_ok=True)
            async with self.connect(database_name, create=True) as conn:
                await conn.execute(text("SELECT 1"))
            logger.info(f"Database created: {database_name}")
            return True

        async with self._server_connection() as conn:
            result = await conn.execute(
                text("SELECT 1 FROM pg_database WHERE datname = :name"),
                {"name": database_name},
            )
            if result.scalar() is not None:
                logger.warning(f"Database already exists: {database_name}")
                return False
            quoted = conn.dialect.identifier_preparer.quote_identifier(database_name)
            await conn.execute(text(f"CREATE DATABASE {quoted}"))
        logger.info(f"Database created: {database_name}")
        return True

    async def drop_database(self, database_name: str) -> bool:
        """Drop the database if it exists. Returns True if it existed."""
        self._check_name(database_name)
        if self.backend == "sqlite":
            path = self.sqlite_path(database_name)
            existed = path.exists()
            path.unlink(missing_ok=True)
            logger.info(f"Database dropped: {database_name} (existed={existed})")
            return existed

        async with self._server_connection() as conn:
            result = await conn.execute(
                text("SELECT 1 FROM pg_database WHERE datname = :name"),
                {"name": database_name},
            )
            existed = result.scalar() is not None
            # Open sessions would make DROP DATABASE fail
            await conn.execute(
                text(
                    "SELECT pg_terminate_backend(pid) FROM pg_stat_activity "
                    "WHERE datname = :name AND pid <> pg_backend_pid()"
                ),
                {"name": database_name},
            )
            quoted = conn.dialect.identifier_preparer.quote_identifier(database_name)
            await conn.execute(text(f"DROP DATABASE IF EXISTS {quoted}"))
        logger.info(f"Database dropped: {database_name} (existed={existed})")
        return existed

    async def create_schema(self, database_name: str) -> None:
        """Create the fixed client tables (idempotent)."""
        async with self.connect(database_name) as conn:
            await conn.run_sync(TenantBase.metadata.create_all)
            await conn.commit()
        logger.info(f"Schema created in database: {database_name}")


_manager: TenantDatabaseManager | None = None


def get_tenant_databases() -> TenantDatabaseManager:
    """Dependency returning the process-wide manager built from settings."""
    global _manager
    if _manager is None:
        _manager = TenantDatabaseManager(
            settings.database_url, settings.tenant_database_dir
        )
    return _manager


def reset_tenant_databases() -> None:
    global _manager
    _manager = None
