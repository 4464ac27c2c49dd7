"""
LawDesk - Enumerated column types shared by models and request schemas.
"""

import enum

from sqlalchemy import Enum as SAEnum


class UserRole(str, enum.Enum):
    """Access level controlling which endpoints a user can reach."""
    ADMIN = "admin"
    LAWYER = "lawyer"
    SECRETARY = "secretary"


class CaseStatus(str, enum.Enum):
    ACTIVE = "active"
    PENDING = "pending"
    CLOSED = "closed"
    ARCHIVED = "archived"


class Priority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DocumentType(str, enum.Enum):
    CASE_FILE = "case_file"
    CLIENT_CORRESPONDENCE = "client_correspondence"
    COURT_DOCUMENT = "court_document"
    CONTRACT = "contract"
    OTHER = "other"


def enum_column(enum_cls: type[enum.Enum]) -> SAEnum:
    """Store enum values (not member names) in a portable VARCHAR column."""
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=32,
        values_callable=lambda members: [member.value for member in members],
    )
