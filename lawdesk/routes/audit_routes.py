"""
LawDesk - Audit Trail Routes (admin only)
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.database import get_db
from lawdesk.auth import require_admin
from lawdesk.audit import get_audit_logs, get_user_audit_trail, verify_audit_chain_integrity
from lawdesk.models.user import User
from lawdesk.schemas import AuditLogOut, ChainVerification


router = APIRouter(prefix="/api/audit-logs", tags=["audit"])


@router.get("", response_model=List[AuditLogOut])
async def list_audit_logs(
    user_id: Optional[str] = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Newest first, optionally only the entries of one user."""
    if user_id:
        return await get_user_audit_trail(db, user_id)
    return await get_audit_logs(db)


@router.get("/verify", response_model=ChainVerification)
async def verify_audit_logs(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Walk the whole hash chain and report the first broken entry, if any."""
    return await verify_audit_chain_integrity(db)
