"""
LawDesk - Case Routes
"""

from typing import List, Optional

from fastapi import APIRouter, Request, Depends, HTTPException, Response, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.database import get_db
from lawdesk.auth import require_auth, get_user_by_id
from lawdesk.audit import log_request_event
from lawdesk.cases import (
    get_case_by_id,
    get_case_by_number,
    get_cases,
    get_cases_by_client,
    get_cases_by_lawyer,
    search_cases,
    create_case,
    update_case,
    delete_case,
)
from lawdesk.clients import get_client_by_id
from lawdesk.models.audit import AuditAction
from lawdesk.models.user import User
from lawdesk.schemas import CaseCreate, CaseUpdate, CaseOut, snapshot
from lawdesk.validation import validate_payload, expect_valid, json_body


router = APIRouter(prefix="/api/cases", tags=["cases"])


async def _get_or_404(db: AsyncSession, case_id: str):
    case = await get_case_by_id(db, case_id)
    if not case:
        raise HTTPException(status_code=404, detail="Case not found")
    return case


async def _check_references(db: AsyncSession, fields: dict, case_id: Optional[str] = None) -> None:
    """400 if the body points at a missing client or lawyer, or reuses a case number."""
    if "client_id" in fields and not await get_client_by_id(db, fields["client_id"]):
        raise HTTPException(status_code=400, detail="Referenced client does not exist")
    if "assigned_lawyer_id" in fields and not await get_user_by_id(db, fields["assigned_lawyer_id"]):
        raise HTTPException(status_code=400, detail="Assigned lawyer does not exist")
    if "case_number" in fields:
        duplicate = await get_case_by_number(db, fields["case_number"])
        if duplicate and duplicate.id != case_id:
            raise HTTPException(status_code=400, detail="Case number already in use")


@router.get("", response_model=List[CaseOut])
async def list_cases(
    search: Optional[str] = None,
    client: Optional[str] = Query(None, description="Only cases of this client id"),
    lawyer: Optional[str] = Query(None, description="Only cases assigned to this user id"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    """All cases, or one filter in order of precedence: search, client, lawyer."""
    if search:
        return await search_cases(db, search)
    if client:
        return await get_cases_by_client(db, client)
    if lawyer:
        return await get_cases_by_lawyer(db, lawyer)
    return await get_cases(db)


@router.get("/{case_id}", response_model=CaseOut)
async def get_case(
    case_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    return await _get_or_404(db, case_id)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=CaseOut)
async def create_case_route(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    data = expect_valid(validate_payload(CaseCreate, await json_body(request))).model_dump()
    await _check_references(db, data)

    case = await create_case(db, data, created_by=user.id)

    await log_request_event(
        db, request,
        action=AuditAction.CASE_CREATED,
        table_name="cases",
        user_id=user.id,
        record_id=case.id,
        new_values=snapshot(CaseOut, case),
    )
    return case


@router.put("/{case_id}", response_model=CaseOut)
async def update_case_route(
    case_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    existing = await _get_or_404(db, case_id)
    old_values = snapshot(CaseOut, existing)

    changes = expect_valid(validate_payload(CaseUpdate, await json_body(request))).changes()
    await _check_references(db, changes, case_id=case_id)

    case = await update_case(db, case_id, changes)

    await log_request_event(
        db, request,
        action=AuditAction.CASE_UPDATED,
        table_name="cases",
        user_id=user.id,
        record_id=case_id,
        old_values=old_values,
        new_values=snapshot(CaseOut, case),
    )
    return case


@router.delete("/{case_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_case_route(
    case_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    existing = await _get_or_404(db, case_id)
    old_values = snapshot(CaseOut, existing)

    await delete_case(db, case_id)

    await log_request_event(
        db, request,
        action=AuditAction.CASE_DELETED,
        table_name="cases",
        user_id=user.id,
        record_id=case_id,
        old_values=old_values,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
