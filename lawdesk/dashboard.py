"""
LawDesk - Dashboard Statistics

Four independent count queries, computed on every request.
"""

from datetime import datetime
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.config import settings
from lawdesk.models import Case, Client, Task, Document, CaseStatus, TaskStatus
from lawdesk.timestamps import days_ago


async def _count(db: AsyncSession, model, *criteria) -> int:
    result = await db.execute(
        select(func.count()).select_from(model).where(*criteria)
    )
    return result.scalar_one()


async def get_dashboard_stats(db: AsyncSession, now: datetime = None) -> dict:
    """Active cases, clients added this week, pending tasks, documents added today."""
    new_client_cutoff = days_ago(settings.NEW_CLIENT_WINDOW_DAYS, now)
    recent_document_cutoff = days_ago(settings.RECENT_DOCUMENT_WINDOW_DAYS, now)

    return {
        "active_cases": await _count(db, Case, Case.status == CaseStatus.ACTIVE),
        "new_clients": await _count(db, Client, Client.created_at >= new_client_cutoff),
        "pending_tasks": await _count(db, Task, Task.status == TaskStatus.PENDING),
        "recent_documents": await _count(db, Document, Document.created_at >= recent_document_cutoff),
    }
