"""
LawDesk - Case Storage
"""

from typing import Optional, List
from sqlalchemy import select, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.models.case import Case
from lawdesk.timestamps import now_utc

# Columns matched by free-text search
SEARCH_COLUMNS = (Case.case_number, Case.title, Case.description)


async def get_case_by_id(db: AsyncSession, case_id: str) -> Optional[Case]:
    return await db.get(Case, case_id)


async def get_case_by_number(db: AsyncSession, case_number: str) -> Optional[Case]:
    result = await db.execute(
        select(Case).where(Case.case_number == case_number)
    )
    return result.scalar_one_or_none()


async def get_cases(db: AsyncSession) -> List[Case]:
    """All cases, newest first."""
    result = await db.execute(
        select(Case).order_by(Case.created_at.desc())
    )
    return list(result.scalars().all())


async def get_cases_by_client(db: AsyncSession, client_id: str) -> List[Case]:
    result = await db.execute(
        select(Case)
        .where(Case.client_id == client_id)
        .order_by(Case.created_at.desc())
    )
    return list(result.scalars().all())


async def get_cases_by_lawyer(db: AsyncSession, lawyer_id: str) -> List[Case]:
    result = await db.execute(
        select(Case)
        .where(Case.assigned_lawyer_id == lawyer_id)
        .order_by(Case.created_at.desc())
    )
    return list(result.scalars().all())


async def search_cases(db: AsyncSession, query: str) -> List[Case]:
    """Cases whose number, title or description contains `query`, ignoring case."""
    result = await db.execute(
        select(Case)
        .where(or_(*(column.icontains(query, autoescape=True) for column in SEARCH_COLUMNS)))
        .order_by(Case.created_at.desc())
    )
    return list(result.scalars().all())


async def create_case(db: AsyncSession, data: dict, created_by: str) -> Case:
    case = Case(**data, created_by=created_by)
    db.add(case)
    await db.commit()
    await db.refresh(case)
    return case


async def update_case(db: AsyncSession, case_id: str, changes: dict) -> Optional[Case]:
    """
    Apply a partial update; returns None if the case does not exist.

    Status changes are not restricted: any status may follow any other.
    """
    case = await get_case_by_id(db, case_id)
    if not case:
        return None
    for field, value in changes.items():
        setattr(case, field, value)
    case.updated_at = now_utc()
    await db.commit()
    await db.refresh(case)
    return case


async def delete_case(db: AsyncSession, case_id: str) -> None:
    """Hard delete. Tasks and documents linked to the case are unlinked by the database."""
    await db.execute(delete(Case).where(Case.id == case_id))
    await db.commit()
