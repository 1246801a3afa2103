"""Shared fixtures: a SQLite registry and a directory of SQLite client databases."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import churchreg.models  # noqa: F401
from churchreg.database import Base
from churchreg.provisioning.tenant_databases import TenantDatabaseManager
from churchreg.schemas.client import ClientCreateRequest


@pytest.fixture
def registry_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'registry.db'}"


@pytest.fixture
async def db(registry_url):
    engine = create_async_engine(registry_url, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def tenant_dir(tmp_path):
    return tmp_path / "tenants"


@pytest.fixture
def tenant_databases(registry_url, tenant_dir):
    return TenantDatabaseManager(registry_url, str(tenant_dir))


@pytest.fixture
def grace_chapel():
    return ClientCreateRequest(
        responsible_name="Jane Doe",
        organization_name="Grace Chapel",
        email="jane@x.org",
        tax_id="11.111/1",
        address="1 Main St",
    )


@pytest.fixture
def read_tenant(tenant_databases):
    """Return an async reader of all rows of a model in a client database."""

    async def read(database_name, model):
        async with tenant_databases.connect(database_name) as conn:
            result = await conn.execute(select(model).order_by(model.id))
            return result.all()

    return read
