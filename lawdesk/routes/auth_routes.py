"""
LawDesk - Authentication Routes
"""

import logging

from fastapi import APIRouter, Request, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.database import get_db
from lawdesk.auth import (
    get_user_by_email,
    get_user_by_username,
    create_user,
    authenticate_user,
    get_current_user,
    open_session,
    close_session,
    require_auth,
)
from lawdesk.audit import log_request_event
from lawdesk.models.audit import AuditAction
from lawdesk.models.user import User
from lawdesk.schemas import RegisterRequest, LoginRequest, UserOut, snapshot
from lawdesk.sessions import SessionStore, get_session_store
from lawdesk.validation import validate_payload, expect_valid, json_body

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


def _user_response(user: User, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=snapshot(UserOut, user))


# =============================================================================
# REGISTER
# =============================================================================

@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=UserOut)
async def register(
    request: Request,
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    """Create an account and log it in immediately."""
    data = expect_valid(validate_payload(RegisterRequest, await json_body(request)))

    if await get_user_by_email(db, data.email):
        raise HTTPException(status_code=400, detail="An account with this email already exists")
    if await get_user_by_username(db, data.username):
        raise HTTPException(status_code=400, detail="This username is already taken")

    user = await create_user(
        db=db,
        email=data.email,
        password=data.password,
        full_name=data.full_name,
        username=data.username,
        role=data.role,
    )

    await log_request_event(
        db, request,
        action=AuditAction.USER_REGISTERED,
        table_name="users",
        user_id=user.id,
        record_id=user.id,
        new_values={"email": user.email, "fullName": user.full_name, "role": user.role.value},
    )
    logger.info("Registered user %s (%s)", user.id, user.role.value)

    response = _user_response(user, status.HTTP_201_CREATED)
    await open_session(response, store, user)
    return response


# =============================================================================
# LOGIN / LOGOUT
# =============================================================================

@router.post("/login", response_model=UserOut)
async def login(
    request: Request,
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    """Check credentials and open a session."""
    data = expect_valid(validate_payload(LoginRequest, await json_body(request)))

    user = await authenticate_user(db, data.email, data.password)
    if not user:
        logger.warning("Failed login attempt for %s", data.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    await log_request_event(
        db, request,
        action=AuditAction.USER_LOGIN,
        table_name="users",
        user_id=user.id,
        record_id=user.id,
    )

    response = _user_response(user)
    await open_session(response, store, user)
    return response


@router.post("/logout")
async def logout(
    request: Request,
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    """Audit the logout if a user was logged in, then destroy the session."""
    user = await get_current_user(request, db, store)
    if user:
        await log_request_event(
            db, request,
            action=AuditAction.USER_LOGOUT,
            table_name="users",
            user_id=user.id,
            record_id=user.id,
        )

    response = JSONResponse(content={"status": "logged_out"})
    await close_session(request, response, store)
    return response


@router.get("/user", response_model=UserOut)
async def current_user(user: User = Depends(require_auth)):
    return user
