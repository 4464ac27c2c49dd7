"""
LawDesk - Client Storage
"""

from typing import Optional, List
from sqlalchemy import select, delete, or_, exists
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.models.client import Client
from lawdesk.models.case import Case
from lawdesk.timestamps import now_utc

# Columns matched by free-text search
SEARCH_COLUMNS = (Client.name, Client.email, Client.phone)


async def get_client_by_id(db: AsyncSession, client_id: str) -> Optional[Client]:
    return await db.get(Client, client_id)


async def get_clients(db: AsyncSession) -> List[Client]:
    """All clients, newest first."""
    result = await db.execute(
        select(Client).order_by(Client.created_at.desc())
    )
    return list(result.scalars().all())


async def search_clients(db: AsyncSession, query: str) -> List[Client]:
    """Clients whose name, email or phone contains `query`, ignoring case."""
    result = await db.execute(
        select(Client)
        .where(or_(*(column.icontains(query, autoescape=True) for column in SEARCH_COLUMNS)))
        .order_by(Client.created_at.desc())
    )
    return list(result.scalars().all())


async def create_client(db: AsyncSession, data: dict, created_by: str) -> Client:
    client = Client(**data, created_by=created_by)
    db.add(client)
    await db.commit()
    await db.refresh(client)
    return client


async def update_client(db: AsyncSession, client_id: str, changes: dict) -> Optional[Client]:
    """Apply a partial update; returns None if the client does not exist."""
    client = await get_client_by_id(db, client_id)
    if not client:
        return None
    for field, value in changes.items():
        setattr(client, field, value)
    client.updated_at = now_utc()
    await db.commit()
    await db.refresh(client)
    return client


async def delete_client(db: AsyncSession, client_id: str) -> None:
    await db.execute(delete(Client).where(Client.id == client_id))
    await db.commit()


async def client_has_cases(db: AsyncSession, client_id: str) -> bool:
    result = await db.execute(
        select(exists().where(Case.client_id == client_id))
    )
    return bool(result.scalar())
