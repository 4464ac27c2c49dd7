"""
LawDesk - Task Storage
"""

from typing import Optional, List
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.models.task import Task
from lawdesk.timestamps import now_utc


async def get_task_by_id(db: AsyncSession, task_id: str) -> Optional[Task]:
    return await db.get(Task, task_id)


async def get_tasks(db: AsyncSession) -> List[Task]:
    """All tasks, newest first."""
    result = await db.execute(
        select(Task).order_by(Task.created_at.desc())
    )
    return list(result.scalars().all())


async def get_tasks_by_case(db: AsyncSession, case_id: str) -> List[Task]:
    result = await db.execute(
        select(Task)
        .where(Task.case_id == case_id)
        .order_by(Task.created_at.desc())
    )
    return list(result.scalars().all())


async def get_tasks_by_user(db: AsyncSession, user_id: str) -> List[Task]:
    """Tasks assigned to a user."""
    result = await db.execute(
        select(Task)
        .where(Task.assigned_to_id == user_id)
        .order_by(Task.created_at.desc())
    )
    return list(result.scalars().all())


async def create_task(db: AsyncSession, data: dict, created_by: str) -> Task:
    task = Task(**data, created_by=created_by)
    db.add(task)
    await db.commit()
    await db.refresh(task)
    return task


async def update_task(db: AsyncSession, task_id: str, changes: dict) -> Optional[Task]:
    """Apply a partial update; returns None if the task does not exist."""
    task = await get_task_by_id(db, task_id)
    if not task:
        return None
    for field, value in changes.items():
        setattr(task, field, value)
    task.updated_at = now_utc()
    await db.commit()
    await db.refresh(task)
    return task


async def delete_task(db: AsyncSession, task_id: str) -> None:
    await db.execute(delete(Task).where(Task.id == task_id))
    await db.commit()
