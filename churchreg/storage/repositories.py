"""Repository functions for the clients registry."""

from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from churchreg.models import Client


async def insert_client(db: AsyncSession, **fields: Any) -> Client:
    """Add a client row and flush so the store assigns its id."""
    client = Client(**fields)
    db.add(client)
    await db.flush()
    await db.refresh(client)
    return client


async def get_client(db: AsyncSession, client_id: int) -> Client | None:
    result = await db.execute(select(Client).where(Client.id == client_id))
    return result.scalar_one_or_none()


async def find_client_by_organization_name(
    db: AsyncSession, organization_name: str
) -> Client | None:
    result = await db.execute(
        select(Client).where(Client.organization_name == organization_name)
    )
    return result.scalar_one_or_none()


async def find_client_by_database_name(
    db: AsyncSession, database_name: str
) -> Client | None:
    result = await db.execute(
        select(Client).where(Client.database_name == database_name)
    )
    return result.scalar_one_or_none()


async def update_client(db: AsyncSession, client_id: int, **changes: Any) -> int:
    """
    Apply a partial update; columns not named in ``changes`` are untouched.
    Returns the number of rows matched.
    """
    if not changes:
        return 0
    result = await db.execute(
        update(Client)
        .where(Client.id == client_id)
        .values(**changes)
    )
    return result.rowcount


async def delete_client(db: AsyncSession, client_id: int) -> int:
    """Delete a client row. Returns the number of rows deleted."""
    result = await db.execute(delete(Client).where(Client.id == client_id))
    return result.rowcount


async def list_clients(db: AsyncSession) -> list[Client]:
    result = await db.execute(select(Client).order_by(Client.id))
    return list(result.scalars().all())
