"""
LawDesk - Request and Response Schemas

JSON uses camelCase field names; snake_case is accepted on input as well.
Create schemas carry the full field set minus server-generated fields,
update schemas are partial patches.
"""

from datetime import datetime, timezone
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from lawdesk.models.enums import UserRole, CaseStatus, Priority, TaskStatus, DocumentType


class APIModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PatchModel(APIModel):
    """
    Partial update. Fields not sent stay untouched; fields listed in
    REQUIRED_COLUMNS may be omitted but not set to null.
    """

    REQUIRED_COLUMNS: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_required(self):
        nulled = sorted(
            name for name in self.model_fields_set
            if name in self.REQUIRED_COLUMNS and getattr(self, name) is None
        )
        if nulled:
            raise ValueError(f"Fields cannot be null: {', '.join(nulled)}")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Offset-aware input is shifted to UTC; naive input is taken as UTC already."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def snapshot(schema: type[APIModel], obj: Any) -> dict[str, Any]:
    """JSON-safe view of a row, as stored in audit log old/new values."""
    return schema.model_validate(obj).model_dump(mode="json", by_alias=True)


# =============================================================================
# AUTH / USERS
# =============================================================================

class RegisterRequest(APIModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    full_name: str = Field(..., min_length=1, max_length=255)
    username: str = Field(..., min_length=1, max_length=100)
    role: UserRole = UserRole.SECRETARY


class LoginRequest(APIModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserUpdate(PatchModel):
    REQUIRED_COLUMNS: ClassVar[frozenset[str]] = frozenset({"full_name", "role", "is_active"})

    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class UserOut(APIModel):
    id: str
    username: str
    email: str
    full_name: str
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime


# =============================================================================
# CLIENTS
# =============================================================================

class ClientCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    national_id: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class ClientUpdate(PatchModel):
    REQUIRED_COLUMNS: ClassVar[frozenset[str]] = frozenset({"name"})

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    national_id: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class ClientOut(APIModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    national_id: Optional[str] = None
    notes: Optional[str] = None
    created_by: str
    created_at: datetime
    updated_at: datetime


# =============================================================================
# CASES
# =============================================================================

class CaseCreate(APIModel):
    case_number: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    status: CaseStatus = CaseStatus.ACTIVE
    priority: Priority = Priority.MEDIUM
    case_type: str = Field(..., min_length=1, max_length=100)
    court: Optional[str] = Field(None, max_length=255)
    judge: Optional[str] = Field(None, max_length=255)
    opposing_party: Optional[str] = Field(None, max_length=255)
    client_id: str = Field(..., min_length=1)
    assigned_lawyer_id: str = Field(..., min_length=1)


class CaseUpdate(PatchModel):
    REQUIRED_COLUMNS: ClassVar[frozenset[str]] = frozenset({
        "case_number", "title", "status", "priority", "case_type", "client_id", "assigned_lawyer_id",
    })

    case_number: Optional[str] = Field(None, min_length=1, max_length=100)
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[CaseStatus] = None
    priority: Optional[Priority] = None
    case_type: Optional[str] = Field(None, min_length=1, max_length=100)
    court: Optional[str] = Field(None, max_length=255)
    judge: Optional[str] = Field(None, max_length=255)
    opposing_party: Optional[str] = Field(None, max_length=255)
    client_id: Optional[str] = Field(None, min_length=1)
    assigned_lawyer_id: Optional[str] = Field(None, min_length=1)


class CaseOut(APIModel):
    id: str
    case_number: str
    title: str
    description: Optional[str] = None
    status: CaseStatus
    priority: Priority
    case_type: str
    court: Optional[str] = None
    judge: Optional[str] = None
    opposing_party: Optional[str] = None
    client_id: str
    assigned_lawyer_id: str
    created_by: str
    created_at: datetime
    updated_at: datetime


# =============================================================================
# TASKS
# =============================================================================

class TaskCreate(APIModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING
    priority: Priority = Priority.MEDIUM
    due_date: Optional[datetime] = None
    case_id: Optional[str] = None
    assigned_to_id: str = Field(..., min_length=1)

    @field_validator("due_date")
    @classmethod
    def due_date_as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class TaskUpdate(PatchModel):
    REQUIRED_COLUMNS: ClassVar[frozenset[str]] = frozenset({"title", "status", "priority", "assigned_to_id"})

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    due_date: Optional[datetime] = None
    case_id: Optional[str] = None
    assigned_to_id: Optional[str] = Field(None, min_length=1)

    @field_validator("due_date")
    @classmethod
    def due_date_as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class TaskOut(APIModel):
    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: Priority
    due_date: Optional[datetime] = None
    case_id: Optional[str] = None
    assigned_to_id: str
    created_by: str
    created_at: datetime
    updated_at: datetime


# =============================================================================
# DOCUMENTS
# =============================================================================

class DocumentMetadata(APIModel):
    """Form fields sent alongside an uploaded file."""
    title: Optional[str] = Field(None, max_length=255)
    document_type: DocumentType = DocumentType.OTHER
    case_id: Optional[str] = None
    client_id: Optional[str] = None


class DocumentOut(APIModel):
    id: str
    title: str
    filename: str
    file_size: int
    mime_type: str
    file_path: str
    document_type: DocumentType
    case_id: Optional[str] = None
    client_id: Optional[str] = None
    uploaded_by: str
    created_at: datetime


# =============================================================================
# AUDIT / DASHBOARD
# =============================================================================

class AuditLogOut(APIModel):
    id: int
    user_id: Optional[str] = None
    action: str
    table_name: str
    record_id: Optional[str] = None
    old_values: Optional[str] = None
    new_values: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    previous_hash: Optional[str] = None
    entry_hash: str
    created_at: datetime


class ChainVerification(APIModel):
    valid: bool
    entries_checked: int
    first_invalid_id: Optional[int] = None
    error: Optional[str] = None


class DashboardStats(APIModel):
    active_cases: int
    new_clients: int
    pending_tasks: int
    recent_documents: int
