"""
LawDesk - Client Routes
"""

from typing import List, Optional

from fastapi import APIRouter, Request, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.database import get_db
from lawdesk.auth import require_auth
from lawdesk.audit import log_request_event
from lawdesk.clients import (
    get_client_by_id,
    get_clients,
    search_clients,
    create_client,
    update_client,
    delete_client,
    client_has_cases,
)
from lawdesk.models.audit import AuditAction
from lawdesk.models.user import User
from lawdesk.schemas import ClientCreate, ClientUpdate, ClientOut, snapshot
from lawdesk.validation import validate_payload, expect_valid, json_body


router = APIRouter(prefix="/api/clients", tags=["clients"])


async def _get_or_404(db: AsyncSession, client_id: str):
    client = await get_client_by_id(db, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.get("", response_model=List[ClientOut])
async def list_clients(
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    """All clients, or those whose name, email or phone contains `search`."""
    if search:
        return await search_clients(db, search)
    return await get_clients(db)


@router.get("/{client_id}", response_model=ClientOut)
async def get_client(
    client_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    return await _get_or_404(db, client_id)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ClientOut)
async def create_client_route(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    data = expect_valid(validate_payload(ClientCreate, await json_body(request)))

    client = await create_client(db, data.model_dump(), created_by=user.id)

    await log_request_event(
        db, request,
        action=AuditAction.CLIENT_CREATED,
        table_name="clients",
        user_id=user.id,
        record_id=client.id,
        new_values=snapshot(ClientOut, client),
    )
    return client


@router.put("/{client_id}", response_model=ClientOut)
async def update_client_route(
    client_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    existing = await _get_or_404(db, client_id)
    old_values = snapshot(ClientOut, existing)

    changes = expect_valid(validate_payload(ClientUpdate, await json_body(request))).changes()

    client = await update_client(db, client_id, changes)

    await log_request_event(
        db, request,
        action=AuditAction.CLIENT_UPDATED,
        table_name="clients",
        user_id=user.id,
        record_id=client_id,
        old_values=old_values,
        new_values=snapshot(ClientOut, client),
    )
    return client


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client_route(
    client_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    existing = await _get_or_404(db, client_id)
    old_values = snapshot(ClientOut, existing)

    # Cases require their client
    if await client_has_cases(db, client_id):
        raise HTTPException(status_code=409, detail="Client still has cases")

    await delete_client(db, client_id)

    await log_request_event(
        db, request,
        action=AuditAction.CLIENT_DELETED,
        table_name="clients",
        user_id=user.id,
        record_id=client_id,
        old_values=old_values,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
