"""
LawDesk - Authentication Logic
"""

import hashlib
import logging
import secrets
from typing import Optional, List
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import Depends, Request, Response, HTTPException, status

from lawdesk.config import settings
from lawdesk.database import get_db
from lawdesk.models.user import User
from lawdesk.models.enums import UserRole
from lawdesk.sessions import SessionStore, get_session_store
from lawdesk.timestamps import now_utc

logger = logging.getLogger(__name__)

# Signs the opaque session id carried in the cookie
serializer = URLSafeTimedSerializer(settings.SECRET_KEY, salt="lawdesk-session")


# =============================================================================
# PASSWORD UTILITIES
# =============================================================================

def hash_password(password: str) -> str:
    """Hash a password using PBKDF2-SHA256, returned as salt$hash."""
    salt = secrets.token_hex(16)
    pwd_hash = hashlib.pbkdf2_hmac(
        'sha256',
        password.encode('utf-8'),
        salt.encode('utf-8'),
        settings.PASSWORD_HASH_ITERATIONS,
    ).hex()
    return f"{salt}${pwd_hash}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        salt, stored_hash = hashed_password.split('$')
    except ValueError:
        return False
    pwd_hash = hashlib.pbkdf2_hmac(
        'sha256',
        plain_password.encode('utf-8'),
        salt.encode('utf-8'),
        settings.PASSWORD_HASH_ITERATIONS,
    ).hex()
    return secrets.compare_digest(pwd_hash, stored_hash)


# =============================================================================
# SESSION COOKIE
# =============================================================================

def sign_session_id(session_id: str) -> str:
    return serializer.dumps(session_id)


def unsign_session_id(token: str, max_age: int = None) -> Optional[str]:
    """
    Recover the session id from a cookie value.

    Returns None if the signature is invalid or older than max_age seconds
    (defaults to SESSION_EXPIRE_MINUTES).
    """
    if max_age is None:
        max_age = settings.SESSION_EXPIRE_MINUTES * 60

    try:
        return serializer.loads(token, max_age=max_age)
    except (BadSignature, SignatureExpired):
        return None


def session_id_from_request(request: Request) -> Optional[str]:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None
    return unsign_session_id(token)


async def open_session(response: Response, store: SessionStore, user: User) -> str:
    """Create a server-side session for `user` and set the cookie on `response`."""
    session_id = await store.create(user.id)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=sign_session_id(session_id),
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=not settings.DEBUG,  # Secure in production
    )
    return session_id


async def close_session(request: Request, response: Response, store: SessionStore) -> None:
    session_id = session_id_from_request(request)
    if session_id:
        await store.destroy(session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)


# =============================================================================
# USER OPERATIONS
# =============================================================================

async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """Get a user by email address."""
    result = await db.execute(
        select(User).where(User.email == email.lower().strip())
    )
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(
        select(User).where(User.username == username.strip())
    )
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: str) -> Optional[User]:
    """Get a user by ID."""
    return await db.get(User, user_id)


async def get_users(db: AsyncSession) -> List[User]:
    """All users, newest first."""
    result = await db.execute(
        select(User).order_by(User.created_at.desc())
    )
    return list(result.scalars().all())


async def create_user(
    db: AsyncSession,
    email: str,
    password: str,
    full_name: str,
    username: str,
    role: UserRole = UserRole.SECRETARY,
) -> User:
    """Create a new, active user account."""
    user = User(
        email=email.lower().strip(),
        username=username.strip(),
        password=hash_password(password),
        full_name=full_name.strip(),
        role=role,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def update_user(db: AsyncSession, user_id: str, changes: dict) -> Optional[User]:
    """Apply a partial update; returns None if the user does not exist."""
    user = await get_user_by_id(db, user_id)
    if not user:
        return None
    for field, value in changes.items():
        setattr(user, field, value)
    user.updated_at = now_utc()
    await db.commit()
    await db.refresh(user)
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> Optional[User]:
    """
    Authenticate a user by email and password.

    Returns the user if authentication succeeds, None otherwise. Unknown
    email, wrong password and disabled account are indistinguishable to
    the caller.
    """
    user = await get_user_by_email(db, email)
    if not user:
        return None
    if not verify_password(password, user.password):
        return None
    if not user.is_active:
        return None
    return user


# =============================================================================
# REQUEST AUTHENTICATION
# =============================================================================

async def get_current_user(
    request: Request,
    db: AsyncSession,
    store: SessionStore,
) -> Optional[User]:
    """
    Get the currently logged-in user from the session cookie.

    Returns None if not authenticated or if the account has been disabled.
    """
    session_id = session_id_from_request(request)
    if not session_id:
        return None

    user_id = await store.get(session_id)
    if not user_id:
        return None

    user = await get_user_by_id(db, user_id)
    if not user or not user.is_active:
        return None

    return user


async def require_auth(
    request: Request,
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
) -> User:
    """Dependency for protected routes: the current user, or 401."""
    user = await get_current_user(request, db, store)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


def require_role(*roles: UserRole):
    """Dependency factory: 401 when logged out, 403 when the role is not allowed."""
    allowed = frozenset(roles)

    async def role_checker(user: User = Depends(require_auth)) -> User:
        if user.role not in allowed:
            logger.warning("User %s (%s) denied, requires one of %s",
                           user.id, user.role.value, sorted(r.value for r in allowed))
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return role_checker


require_admin = require_role(UserRole.ADMIN)
