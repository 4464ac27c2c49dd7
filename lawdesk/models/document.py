"""
LawDesk - Document Model
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
from sqlalchemy import String, DateTime, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from lawdesk.database import Base, new_id
from lawdesk.models.enums import DocumentType, enum_column
from lawdesk.timestamps import now_utc


class Document(Base):
    """An uploaded file stored on local disk, optionally linked to a case and/or client."""

    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    # File details
    filename: Mapped[str] = mapped_column(String(255), nullable=False)  # original upload name
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)  # bytes
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_path: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)

    document_type: Mapped[DocumentType] = mapped_column(
        enum_column(DocumentType), nullable=False, default=DocumentType.OTHER
    )

    # Optional links
    case_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("cases.id", ondelete="SET NULL"), nullable=True, index=True
    )
    client_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("clients.id", ondelete="SET NULL"), nullable=True, index=True
    )

    uploaded_by: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)

    # Documents are immutable once uploaded: no updated_at
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=now_utc, index=True)

    def __repr__(self) -> str:
        return f"<Document {self.id}: {self.filename}>"

    @property
    def path(self) -> Path:
        return Path(self.file_path)
