"""
LawDesk - Document Upload/Download Logic

Files are written to disk before their database row exists and removed from
disk before their row is deleted. A failed insert removes the file it left
behind; a file already missing at delete time does not block the row removal.
"""

import logging
import mimetypes
import uuid
from pathlib import Path
from typing import Optional, List
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import UploadFile, HTTPException, status

from lawdesk.config import settings
from lawdesk.models.document import Document
from lawdesk.models.enums import DocumentType

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024  # 64KB chunks


def generate_stored_filename(original_filename: str) -> str:
    """Generate a unique filename for storage, keeping the (lower-cased) extension."""
    ext = Path(original_filename).suffix.lower()
    return f"{uuid.uuid4().hex}{ext}"


def validate_file(file: UploadFile) -> None:
    """Reject uploads without a name or with an extension outside the allow-list."""
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file uploaded",
        )

    ext = Path(file.filename).suffix.lower()
    if ext not in settings.ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type: {ext or '(none)'}. "
                   f"Allowed: {', '.join(sorted(settings.ALLOWED_EXTENSIONS))}",
        )


def guess_mime_type(file: UploadFile) -> str:
    if file.content_type and file.content_type != "application/octet-stream":
        return file.content_type
    guessed, _ = mimetypes.guess_type(file.filename or "")
    return guessed or "application/octet-stream"


async def save_uploaded_file(file: UploadFile, stored_filename: str) -> tuple[Path, int]:
    """
    Save uploaded file to disk in chunks, enforcing the size limit while reading.

    Returns the path written and the file size in bytes.
    """
    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    file_path = upload_dir / stored_filename
    max_size = settings.max_file_size_bytes
    file_size = 0

    try:
        with open(file_path, "wb") as f:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                file_size += len(chunk)
                if file_size > max_size:
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail=f"File too large. Maximum size is {settings.MAX_FILE_SIZE_MB}MB",
                    )
                f.write(chunk)
    except HTTPException:
        # Clean up partial file on size rejection
        file_path.unlink(missing_ok=True)
        raise

    return file_path, file_size


def remove_stored_file(file_path: Path) -> bool:
    """Delete a stored file. Returns False (and logs) if it was already gone."""
    try:
        file_path.unlink()
    except FileNotFoundError:
        logger.warning("Stored file already missing: %s", file_path)
        return False
    return True


async def create_document(
    db: AsyncSession,
    file: UploadFile,
    uploaded_by: str,
    title: Optional[str] = None,
    document_type: DocumentType = DocumentType.OTHER,
    case_id: Optional[str] = None,
    client_id: Optional[str] = None,
) -> Document:
    """
    Save the file, then create its document record.

    If the insert fails the file is removed again and the error propagates.
    """
    validate_file(file)

    original_filename = Path(file.filename).name
    stored_filename = generate_stored_filename(original_filename)

    file_path, file_size = await save_uploaded_file(file, stored_filename)

    document = Document(
        title=(title or "").strip() or original_filename,
        filename=original_filename,
        file_size=file_size,
        mime_type=guess_mime_type(file),
        file_path=str(file_path),
        document_type=document_type,
        case_id=case_id,
        client_id=client_id,
        uploaded_by=uploaded_by,
    )

    try:
        db.add(document)
        await db.commit()
    except Exception:
        await db.rollback()
        logger.warning("Document insert failed, removing orphaned file %s", file_path)
        remove_stored_file(file_path)
        raise

    await db.refresh(document)
    return document


async def get_document_by_id(db: AsyncSession, document_id: str) -> Optional[Document]:
    return await db.get(Document, document_id)


async def get_documents(db: AsyncSession) -> List[Document]:
    """All documents, newest first."""
    result = await db.execute(
        select(Document).order_by(Document.created_at.desc())
    )
    return list(result.scalars().all())


async def get_documents_by_case(db: AsyncSession, case_id: str) -> List[Document]:
    result = await db.execute(
        select(Document)
        .where(Document.case_id == case_id)
        .order_by(Document.created_at.desc())
    )
    return list(result.scalars().all())


async def get_documents_by_client(db: AsyncSession, client_id: str) -> List[Document]:
    result = await db.execute(
        select(Document)
        .where(Document.client_id == client_id)
        .order_by(Document.created_at.desc())
    )
    return list(result.scalars().all())


async def delete_document(db: AsyncSession, document: Document) -> None:
    """Remove the stored file (tolerating its absence), then the row."""
    remove_stored_file(document.path)
    await db.execute(delete(Document).where(Document.id == document.id))
    await db.commit()
