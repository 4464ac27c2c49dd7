"""
LawDesk - Audit Log Model

Append-only audit trail with hash-chain integrity.
"""

import enum
import hashlib
import json
from datetime import datetime
from typing import Optional
from sqlalchemy import String, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column
from lawdesk.database import Base
from lawdesk.timestamps import now_utc


class AuditLog(Base):
    """
    Immutable audit log entry with hash-chain integrity.

    Each entry stores a hash of its own content together with the previous
    entry's hash, so any edit or removal of an earlier row breaks the chain.
    Rows are never updated or deleted by the application.
    """

    __tablename__ = "audit_logs"

    # Sequential so the chain has a well-defined order
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Actor (absent for anonymous/system events)
    user_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)

    # Event details
    action: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    table_name: Mapped[str] = mapped_column(String(100), nullable=False)
    record_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)

    # JSON snapshots
    old_values: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    new_values: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Request context
    ip_address: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Hash chain for integrity verification
    previous_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)  # SHA-256 hex
    entry_hash: Mapped[str] = mapped_column(String(64), nullable=False, index=True)  # SHA-256 hex

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=now_utc, index=True)

    def __repr__(self) -> str:
        return f"<AuditLog {self.id}: {self.action} {self.table_name}/{self.record_id}>"

    @staticmethod
    def compute_hash(
        action: str,
        table_name: str,
        user_id: Optional[str],
        record_id: Optional[str],
        old_values: Optional[str],
        new_values: Optional[str],
        ip_address: Optional[str],
        previous_hash: Optional[str],
        created_at: datetime,
    ) -> str:
        """Compute the SHA-256 of a canonical JSON rendering of the entry."""
        data = {
            "action": action,
            "table_name": table_name,
            "user_id": user_id,
            "record_id": record_id,
            "old_values": old_values,
            "new_values": new_values,
            "ip_address": ip_address,
            "previous_hash": previous_hash or "",
            "created_at": created_at.isoformat(),
        }
        canonical_string = json.dumps(data, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical_string.encode("utf-8")).hexdigest()

    def verify_hash(self) -> bool:
        """Verify that this entry's hash is valid."""
        computed = self.compute_hash(
            action=self.action,
            table_name=self.table_name,
            user_id=self.user_id,
            record_id=self.record_id,
            old_values=self.old_values,
            new_values=self.new_values,
            ip_address=self.ip_address,
            previous_hash=self.previous_hash,
            created_at=self.created_at,
        )
        return computed == self.entry_hash


class AuditAction(str, enum.Enum):
    """Every action name written to the audit trail."""

    # User events
    USER_REGISTERED = "user_registered"
    USER_LOGIN = "user_login"
    USER_LOGOUT = "user_logout"
    USER_UPDATED = "user_updated"

    # Client events
    CLIENT_CREATED = "client_created"
    CLIENT_UPDATED = "client_updated"
    CLIENT_DELETED = "client_deleted"

    # Case events
    CASE_CREATED = "case_created"
    CASE_UPDATED = "case_updated"
    CASE_DELETED = "case_deleted"

    # Task events
    TASK_CREATED = "task_created"
    TASK_UPDATED = "task_updated"
    TASK_DELETED = "task_deleted"

    # Document events
    DOCUMENT_UPLOADED = "document_uploaded"
    DOCUMENT_DOWNLOADED = "document_downloaded"
    DOCUMENT_DELETED = "document_deleted"
