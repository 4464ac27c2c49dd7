"""
LawDesk - Case Model
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import String, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column
from lawdesk.database import Base, new_id
from lawdesk.models.enums import CaseStatus, Priority, enum_column
from lawdesk.timestamps import now_utc


class Case(Base):
    """
    A legal matter handled for a client.

    Status is a flat enumeration: any status may be replaced by any other
    through an update, there is no transition graph.
    """

    __tablename__ = "cases"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    case_number: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[CaseStatus] = mapped_column(
        enum_column(CaseStatus), nullable=False, default=CaseStatus.ACTIVE, index=True
    )
    priority: Mapped[Priority] = mapped_column(enum_column(Priority), nullable=False, default=Priority.MEDIUM)

    # Court details
    case_type: Mapped[str] = mapped_column(String(100), nullable=False)
    court: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    judge: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    opposing_party: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Relations
    client_id: Mapped[str] = mapped_column(ForeignKey("clients.id"), nullable=False, index=True)
    assigned_lawyer_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    created_by: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=now_utc, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=now_utc, onupdate=now_utc)

    def __repr__(self) -> str:
        return f"<Case {self.case_number}: {self.status.value}>"
