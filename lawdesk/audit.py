"""
LawDesk - Audit Service

Append-only audit logging with hash-chain integrity verification.
"""

import json
from typing import Optional, List, Any
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import Request

from lawdesk.models.audit import AuditLog, AuditAction
from lawdesk.timestamps import now_utc

MAX_USER_AGENT_LENGTH = 500


def request_context(request: Request) -> dict:
    """Client IP and user agent of a request, as stored on audit entries."""
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


def _serialize(values: Optional[Any]) -> Optional[str]:
    if values is None:
        return None
    return json.dumps(values, sort_keys=True, default=str)


async def log_event(
    db: AsyncSession,
    action: AuditAction,
    table_name: str,
    user_id: Optional[str] = None,
    record_id: Optional[str] = None,
    old_values: Optional[dict] = None,
    new_values: Optional[dict] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> AuditLog:
    """
    Create an immutable audit log entry with hash chain.

    Args:
        db: Database session
        action: What happened (AuditAction member)
        table_name: Table of the affected record
        user_id: Optional ID of the user who triggered the event
        record_id: Optional ID of the affected record
        old_values: Snapshot before the change
        new_values: Snapshot after the change
        ip_address: Optional client IP address
        user_agent: Optional client user agent

    Returns:
        The created AuditLog entry
    """
    # Get the previous entry's hash for chain integrity
    previous_entry = await get_last_audit_entry(db)
    previous_hash = previous_entry.entry_hash if previous_entry else None

    old_json = _serialize(old_values)
    new_json = _serialize(new_values)

    # Truncate user agent if too long
    if user_agent and len(user_agent) > MAX_USER_AGENT_LENGTH:
        user_agent = user_agent[:MAX_USER_AGENT_LENGTH]

    created_at = now_utc()
    action_name = AuditAction(action).value

    entry_hash = AuditLog.compute_hash(
        action=action_name,
        table_name=table_name,
        user_id=user_id,
        record_id=record_id,
        old_values=old_json,
        new_values=new_json,
        ip_address=ip_address,
        previous_hash=previous_hash,
        created_at=created_at,
    )

    audit_entry = AuditLog(
        action=action_name,
        table_name=table_name,
        user_id=user_id,
        record_id=record_id,
        old_values=old_json,
        new_values=new_json,
        ip_address=ip_address,
        user_agent=user_agent,
        previous_hash=previous_hash,
        entry_hash=entry_hash,
        created_at=created_at,
    )

    db.add(audit_entry)
    await db.commit()
    await db.refresh(audit_entry)

    return audit_entry


async def log_request_event(
    db: AsyncSession,
    request: Request,
    action: AuditAction,
    table_name: str,
    user_id: Optional[str],
    record_id: Optional[str] = None,
    old_values: Optional[dict] = None,
    new_values: Optional[dict] = None,
) -> AuditLog:
    """Convenience wrapper filling IP and user agent from the request."""
    return await log_event(
        db=db,
        action=action,
        table_name=table_name,
        user_id=user_id,
        record_id=record_id,
        old_values=old_values,
        new_values=new_values,
        **request_context(request),
    )


async def get_last_audit_entry(db: AsyncSession) -> Optional[AuditLog]:
    """Get the most recent audit log entry."""
    result = await db.execute(
        select(AuditLog).order_by(desc(AuditLog.id)).limit(1)
    )
    return result.scalar_one_or_none()


async def get_audit_logs(db: AsyncSession) -> List[AuditLog]:
    """All audit entries, newest first."""
    result = await db.execute(
        select(AuditLog).order_by(desc(AuditLog.id))
    )
    return list(result.scalars().all())


async def get_user_audit_trail(db: AsyncSession, user_id: str) -> List[AuditLog]:
    """Entries triggered by one user, newest first."""
    result = await db.execute(
        select(AuditLog)
        .where(AuditLog.user_id == user_id)
        .order_by(desc(AuditLog.id))
    )
    return list(result.scalars().all())


def _chain_failure(entries_checked: int, entry: AuditLog, error: str) -> dict:
    return {
        "valid": False,
        "entries_checked": entries_checked,
        "first_invalid_id": entry.id,
        "error": error,
    }


async def verify_audit_chain_integrity(db: AsyncSession) -> dict:
    """
    Verify the integrity of the whole audit log hash chain.

    The oldest remaining entry must be the genesis entry (no previous hash),
    so removing entries from the head of the chain is detected as well.

    Returns:
        {
            "valid": bool,
            "entries_checked": int,
            "first_invalid_id": int or None,
            "error": str or None
        }
    """
    result = await db.execute(
        select(AuditLog).order_by(AuditLog.id.asc())
    )
    entries = list(result.scalars().all())

    entries_checked = 0
    previous_hash = None

    for entry in entries:
        entries_checked += 1

        if not entry.verify_hash():
            return _chain_failure(
                entries_checked, entry,
                f"Entry {entry.id} hash mismatch - data may have been tampered",
            )

        if entry.previous_hash != previous_hash:
            if previous_hash is None:
                error = f"Entry {entry.id} is not the start of the chain - earlier entries are missing"
            else:
                error = f"Entry {entry.id} chain broken - previous_hash mismatch"
            return _chain_failure(entries_checked, entry, error)

        previous_hash = entry.entry_hash

    return {
        "valid": True,
        "entries_checked": entries_checked,
        "first_invalid_id": None,
        "error": None,
    }
