"""
LawDesk - Server-side Session Store

Sessions live on the server, keyed by an opaque random id. The cookie only
carries that id (signed, see lawdesk.auth). The store is created during
application startup, attached to ``app.state.session_store`` and cleared on
shutdown; handlers receive it through the ``get_session_store`` dependency.

The in-memory store is per process: sessions are not shared between
several server instances.
"""

import asyncio
import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from fastapi import Request


@dataclass
class SessionRecord:
    user_id: str
    expires_at: float  # time.monotonic() deadline


class SessionStore(ABC):
    """Interface for session persistence backends."""

    @abstractmethod
    async def create(self, user_id: str) -> str:
        """Open a session for `user_id` and return its id."""

    @abstractmethod
    async def get(self, session_id: str) -> Optional[str]:
        """Return the user id bound to a live session, None if unknown or expired."""

    @abstractmethod
    async def destroy(self, session_id: str) -> None:
        """Remove a session. Unknown ids are ignored."""

    @abstractmethod
    async def clear(self) -> None:
        """Drop every session."""


class MemorySessionStore(SessionStore):
    """In-process store with lazy expiry."""

    def __init__(self, ttl_seconds: int):
        self.ttl_seconds = ttl_seconds
        self._sessions: dict[str, SessionRecord] = {}
        self._lock = asyncio.Lock()

    async def create(self, user_id: str) -> str:
        session_id = secrets.token_urlsafe(32)
        async with self._lock:
            self._purge_expired()
            self._sessions[session_id] = SessionRecord(
                user_id=user_id,
                expires_at=time.monotonic() + self.ttl_seconds,
            )
        return session_id

    async def get(self, session_id: str) -> Optional[str]:
        async with self._lock:
            record = self._sessions.get(session_id)
            if record is None:
                return None
            if record.expires_at <= time.monotonic():
                del self._sessions[session_id]
                return None
            return record.user_id

    async def destroy(self, session_id: str) -> None:
        async with self._lock:
            self._sessions.pop(session_id, None)

    async def clear(self) -> None:
        async with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)

    def _purge_expired(self) -> None:
        now = time.monotonic()
        expired = [sid for sid, record in self._sessions.items() if record.expires_at <= now]
        for sid in expired:
            del self._sessions[sid]


def get_session_store(request: Request) -> SessionStore:
    """Dependency returning the store attached to the running application."""
    return request.app.state.session_store
