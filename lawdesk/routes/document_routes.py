"""
LawDesk - Document Routes
"""

from typing import List, Optional

from fastapi import APIRouter, Request, Depends, Form, UploadFile, File, HTTPException, Response, Query, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.database import get_db
from lawdesk.auth import require_auth
from lawdesk.audit import log_request_event
from lawdesk.cases import get_case_by_id
from lawdesk.clients import get_client_by_id
from lawdesk.documents import (
    validate_file,
    create_document,
    get_document_by_id,
    get_documents,
    get_documents_by_case,
    get_documents_by_client,
    delete_document,
)
from lawdesk.models.audit import AuditAction
from lawdesk.models.user import User
from lawdesk.schemas import DocumentMetadata, DocumentOut, snapshot
from lawdesk.validation import validate_payload, expect_valid


router = APIRouter(prefix="/api/documents", tags=["documents"])


async def _get_or_404(db: AsyncSession, document_id: str):
    document = await get_document_by_id(db, document_id)
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    return document


# =============================================================================
# LIST / DETAIL
# =============================================================================

@router.get("", response_model=List[DocumentOut])
async def list_documents(
    case_id: Optional[str] = Query(None, alias="caseId"),
    client_id: Optional[str] = Query(None, alias="clientId"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    if case_id:
        return await get_documents_by_case(db, case_id)
    if client_id:
        return await get_documents_by_client(db, client_id)
    return await get_documents(db)


@router.get("/{document_id}", response_model=DocumentOut)
async def get_document(
    document_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    return await _get_or_404(db, document_id)


# =============================================================================
# UPLOAD
# =============================================================================

@router.post("/upload", status_code=status.HTTP_201_CREATED, response_model=DocumentOut)
async def upload_document(
    request: Request,
    file: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    document_type: Optional[str] = Form(None, alias="documentType"),
    case_id: Optional[str] = Form(None, alias="caseId"),
    client_id: Optional[str] = Form(None, alias="clientId"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    """Store a single file (multipart field `file`) and record it."""
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")

    # Rejected types never reach the disk or the database
    validate_file(file)

    # Browsers send empty strings for unset form fields
    form = {
        "title": title,
        "document_type": document_type,
        "case_id": case_id,
        "client_id": client_id,
    }
    metadata = expect_valid(validate_payload(
        DocumentMetadata, {key: value for key, value in form.items() if value}
    ))

    if metadata.case_id and not await get_case_by_id(db, metadata.case_id):
        raise HTTPException(status_code=400, detail="Referenced case does not exist")
    if metadata.client_id and not await get_client_by_id(db, metadata.client_id):
        raise HTTPException(status_code=400, detail="Referenced client does not exist")

    document = await create_document(
        db=db,
        file=file,
        uploaded_by=user.id,
        title=metadata.title,
        document_type=metadata.document_type,
        case_id=metadata.case_id,
        client_id=metadata.client_id,
    )

    await log_request_event(
        db, request,
        action=AuditAction.DOCUMENT_UPLOADED,
        table_name="documents",
        user_id=user.id,
        record_id=document.id,
        new_values=snapshot(DocumentOut, document),
    )
    return document


# =============================================================================
# DOWNLOAD
# =============================================================================

@router.get("/{document_id}/download")
async def download_document(
    document_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    """Stream the stored file back under its original filename."""
    document = await _get_or_404(db, document_id)

    if not document.path.exists():
        raise HTTPException(status_code=404, detail="File not found on server")

    await log_request_event(
        db, request,
        action=AuditAction.DOCUMENT_DOWNLOADED,
        table_name="documents",
        user_id=user.id,
        record_id=document.id,
    )

    return FileResponse(
        path=document.path,
        filename=document.filename,
        media_type=document.mime_type,
    )


# =============================================================================
# DELETE
# =============================================================================

@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document_route(
    document_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    document = await _get_or_404(db, document_id)
    old_values = snapshot(DocumentOut, document)

    await delete_document(db, document)

    await log_request_event(
        db, request,
        action=AuditAction.DOCUMENT_DELETED,
        table_name="documents",
        user_id=user.id,
        record_id=document_id,
        old_values=old_values,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
