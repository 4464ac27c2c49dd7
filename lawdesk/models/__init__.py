# LawDesk - Models Package

from lawdesk.models.enums import UserRole, CaseStatus, Priority, TaskStatus, DocumentType
from lawdesk.models.user import User
from lawdesk.models.client import Client
from lawdesk.models.case import Case
from lawdesk.models.task import Task
from lawdesk.models.document import Document
from lawdesk.models.audit import AuditLog, AuditAction

__all__ = [
    "UserRole",
    "CaseStatus",
    "Priority",
    "TaskStatus",
    "DocumentType",
    "User",
    "Client",
    "Case",
    "Task",
    "Document",
    "AuditLog",
    "AuditAction",
]
