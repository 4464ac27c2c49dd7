"""
LawDesk - User Administration Routes (admin only)
"""

from typing import List

from fastapi import APIRouter, Request, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.database import get_db
from lawdesk.auth import require_admin, get_users, get_user_by_id, update_user
from lawdesk.audit import log_request_event
from lawdesk.models.audit import AuditAction
from lawdesk.models.user import User
from lawdesk.schemas import UserUpdate, UserOut, snapshot
from lawdesk.validation import validate_payload, expect_valid, json_body


router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=List[UserOut])
async def list_users(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return await get_users(db)


@router.put("/{user_id}", response_model=UserOut)
async def update_user_route(
    user_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Change a user's name, role or active flag."""
    existing = await get_user_by_id(db, user_id)
    if not existing:
        raise HTTPException(status_code=404, detail="User not found")
    old_values = snapshot(UserOut, existing)

    changes = expect_valid(validate_payload(UserUpdate, await json_body(request))).changes()

    user = await update_user(db, user_id, changes)

    await log_request_event(
        db, request,
        action=AuditAction.USER_UPDATED,
        table_name="users",
        user_id=admin.id,
        record_id=user_id,
        old_values=old_values,
        new_values=snapshot(UserOut, user),
    )
    return user
