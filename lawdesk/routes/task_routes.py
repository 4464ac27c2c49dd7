"""
LawDesk - Task Routes
"""

from typing import List, Optional

from fastapi import APIRouter, Request, Depends, HTTPException, Response, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.database import get_db
from lawdesk.auth import require_auth, get_user_by_id
from lawdesk.audit import log_request_event
from lawdesk.cases import get_case_by_id
from lawdesk.tasks import (
    get_task_by_id,
    get_tasks,
    get_tasks_by_case,
    get_tasks_by_user,
    create_task,
    update_task,
    delete_task,
)
from lawdesk.models.audit import AuditAction
from lawdesk.models.user import User
from lawdesk.schemas import TaskCreate, TaskUpdate, TaskOut, snapshot
from lawdesk.validation import validate_payload, expect_valid, json_body


router = APIRouter(prefix="/api/tasks", tags=["tasks"])


async def _get_or_404(db: AsyncSession, task_id: str):
    task = await get_task_by_id(db, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


async def _check_references(db: AsyncSession, fields: dict) -> None:
    if fields.get("case_id") and not await get_case_by_id(db, fields["case_id"]):
        raise HTTPException(status_code=400, detail="Referenced case does not exist")
    if "assigned_to_id" in fields and not await get_user_by_id(db, fields["assigned_to_id"]):
        raise HTTPException(status_code=400, detail="Assigned user does not exist")


@router.get("", response_model=List[TaskOut])
async def list_tasks(
    case_id: Optional[str] = Query(None, alias="caseId"),
    user_id: Optional[str] = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    """All tasks, or those of one case, or those assigned to one user."""
    if case_id:
        return await get_tasks_by_case(db, case_id)
    if user_id:
        return await get_tasks_by_user(db, user_id)
    return await get_tasks(db)


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    return await _get_or_404(db, task_id)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=TaskOut)
async def create_task_route(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    data = expect_valid(validate_payload(TaskCreate, await json_body(request))).model_dump()
    await _check_references(db, data)

    task = await create_task(db, data, created_by=user.id)

    await log_request_event(
        db, request,
        action=AuditAction.TASK_CREATED,
        table_name="tasks",
        user_id=user.id,
        record_id=task.id,
        new_values=snapshot(TaskOut, task),
    )
    return task


@router.put("/{task_id}", response_model=TaskOut)
async def update_task_route(
    task_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    existing = await _get_or_404(db, task_id)
    old_values = snapshot(TaskOut, existing)

    changes = expect_valid(validate_payload(TaskUpdate, await json_body(request))).changes()
    await _check_references(db, changes)

    task = await update_task(db, task_id, changes)

    await log_request_event(
        db, request,
        action=AuditAction.TASK_UPDATED,
        table_name="tasks",
        user_id=user.id,
        record_id=task_id,
        old_values=old_values,
        new_values=snapshot(TaskOut, task),
    )
    return task


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task_route(
    task_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    existing = await _get_or_404(db, task_id)
    old_values = snapshot(TaskOut, existing)

    await delete_task(db, task_id)

    await log_request_event(
        db, request,
        action=AuditAction.TASK_DELETED,
        table_name="tasks",
        user_id=user.id,
        record_id=task_id,
        old_values=old_values,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
