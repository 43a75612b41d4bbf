"""In-memory request rate limiting for API routes."""

import threading
from collections import defaultdict, deque
from datetime import datetime, timedelta
from typing import Callable, Deque, Dict

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware


class RateLimiter:
    """
    Sliding-window request counter keyed by client identifier.

    Allows at most max_requests within window_seconds per identifier.
    """

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: int = 15 * 60,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._hits: Dict[str, Deque[datetime]] = defaultdict(deque)
        self._max_requests = max_requests
        self._window = timedelta(seconds=window_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._last_prune = clock()

    def allow(self, identifier: str) -> bool:
        """Record a request and return whether it is within the limit."""
        now = self._clock()
        with self._lock:
            if now - self._last_prune >= self._window:
                self._prune(now)
            hits = self._hits[identifier]
            while hits and now - hits[0] >= self._window:
                hits.popleft()
            if len(hits) >= self._max_requests:
                return False
            hits.append(now)
            return True

    def _prune(self, now: datetime) -> None:
        """Forget identifiers with no requests in the current window."""
        idle = [
            identifier
            for identifier, hits in self._hits.items()
            if not hits or now - hits[-1] >= self._window
        ]
        for identifier in idle:
            del self._hits[identifier]
        self._last_prune = now

    @property
    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._hits)

    def reset(self, identifier: str) -> None:
        with self._lock:
            self._hits.pop(identifier, None)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests under path_prefix once a client exceeds its limit."""

    def __init__(self, app, limiter: RateLimiter, path_prefix: str = "/api/") -> None:
        super().__init__(app)
        self.limiter = limiter
        self.path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path.startswith(self.path_prefix):
            client = request.client.host if request.client else "unknown"
            if not self.limiter.allow(client):
                return JSONResponse(
                    status_code=429,
                    content={"error": "Too many requests, please try again later."},
                )
        return await call_next(request)
