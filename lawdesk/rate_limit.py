"""
LawDesk - Rate Limiting

Simple in-memory rate limiter using a sliding window per client IP and path.
Like the session store, it is per process.
"""

import logging
import time
from collections import deque
from typing import Callable
from starlette.types import ASGIApp, Receive, Scope, Send
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


def _expire(hits: deque, cutoff: float) -> None:
    while hits and hits[0] <= cutoff:
        hits.popleft()


class RateLimitStore:
    """
    Hit timestamps per key, oldest first, each key with its own window.

    Every `sweep_interval` seconds the next check also drops the keys whose
    window holds no hits any more, so clients that went away are forgotten.
    """

    def __init__(self, sweep_interval: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self._hits: dict[str, deque[float]] = {}
        self._windows: dict[str, int] = {}
        self._sweep_interval = sweep_interval
        self._clock = clock
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._hits)

    def is_rate_limited(self, key: str, max_requests: int, window_seconds: int) -> bool:
        """Check if the key has exceeded the rate limit, recording the hit if not."""
        now = self._clock()
        if now - self._last_sweep >= self._sweep_interval:
            self._sweep(now)

        self._windows[key] = window_seconds
        hits = self._hits.setdefault(key, deque())
        _expire(hits, now - window_seconds)

        if len(hits) >= max_requests:
            return True

        hits.append(now)
        return False

    def _sweep(self, now: float) -> None:
        for key in list(self._hits):
            hits = self._hits[key]
            _expire(hits, now - self._windows[key])
            if not hits:
                del self._hits[key]
                del self._windows[key]
        self._last_sweep = now
        logger.debug("Rate limit sweep done, %d keys tracked", len(self._hits))

    def reset(self):
        """Forget all hits."""
        self._hits.clear()
        self._windows.clear()
        self._last_sweep = self._clock()


rate_limit_store = RateLimitStore()

# {path: (max_requests, window_seconds)}, applied to POST requests
RATE_LIMIT_RULES: dict[str, tuple[int, int]] = {
    "/api/login": (10, 60),
    "/api/register": (10, 60),
    "/api/documents/upload": (30, 60),
}


class RateLimitMiddleware:
    """
    Rate limiting middleware.

    Raw ASGI so the request body is never touched.
    """

    def __init__(self, app: ASGIApp, store: RateLimitStore = None):
        self.app = app
        self.store = store or rate_limit_store

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)

        if request.method != "POST":
            await self.app(scope, receive, send)
            return

        path = request.url.path
        rule = RATE_LIMIT_RULES.get(path.rstrip("/") or "/")
        if rule is None:
            await self.app(scope, receive, send)
            return

        max_requests, window_seconds = rule

        client_ip = request.client.host if request.client else "unknown"
        key = f"{client_ip}:{path}"

        if self.store.is_rate_limited(key, max_requests, window_seconds):
            logger.warning("Rate limit hit for %s on %s", client_ip, path)
            response = JSONResponse(
                status_code=429,
                content={"detail": "Too many requests. Please try again later."},
                headers={"Retry-After": str(window_seconds)},
            )
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)
