"""In-memory server-side session store."""

import logging
import secrets
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from app.auth.errors import SessionNotFoundError
from app.auth.models import Principal, Session

logger = logging.getLogger(__name__)

DEFAULT_SESSION_LIFETIME = timedelta(hours=24)
DEFAULT_SWEEP_INTERVAL = timedelta(hours=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """Maps opaque session ids to session records.

    Every operation is serialized per session id. A short registry lock
    guards the underlying dicts; no lock spans more than one session.
    Expired sessions are evicted lazily when they are read, and swept in
    bulk from create() at most once per sweep_interval.
    """

    def __init__(
        self,
        lifetime: timedelta = DEFAULT_SESSION_LIFETIME,
        clock: Callable[[], datetime] = utc_now,
        sweep_interval: timedelta = DEFAULT_SWEEP_INTERVAL,
    ) -> None:
        self.lifetime = lifetime
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._last_sweep = clock()
        self._sessions: Dict[str, Session] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._sessions)

    def _lock_for(self, session_id: str) -> Optional[threading.Lock]:
        with self._registry_lock:
            return self._locks.get(session_id)

    def _load(self, session_id: str) -> Session:
        """Return a live session. Caller must hold the session's lock."""
        with self._registry_lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        if session.is_expired(self._clock()):
            self._evict(session_id)
            raise SessionNotFoundError(session_id)
        return session

    def _save(self, session: Session) -> None:
        with self._registry_lock:
            self._sessions[session.session_id] = session

    def _evict(self, session_id: str) -> None:
        with self._registry_lock:
            self._sessions.pop(session_id, None)
            self._locks.pop(session_id, None)

    def _sweep_due(self, now: datetime) -> bool:
        with self._registry_lock:
            if now - self._last_sweep < self.sweep_interval:
                return False
            self._last_sweep = now
            return True

    def create(self) -> Session:
        """Allocate a new, unauthenticated session."""
        now = self._clock()
        if self._sweep_due(now):
            self.sweep_expired()
        with self._registry_lock:
            session_id = secrets.token_urlsafe(32)
            while session_id in self._sessions:
                session_id = secrets.token_urlsafe(32)
            session = Session(
                session_id=session_id,
                created_at=now,
                expires_at=now + self.lifetime,
            )
            self._sessions[session_id] = session
            self._locks[session_id] = threading.Lock()
        return session

    def get(self, session_id: str) -> Session:
        """Return the session, or raise SessionNotFoundError if absent or expired."""
        lock = self._lock_for(session_id)
        if lock is None:
            raise SessionNotFoundError(session_id)
        with lock:
            return self._load(session_id)

    def attach(self, session_id: str, principal: Principal) -> Session:
        """Bind a principal to an existing session."""
        lock = self._lock_for(session_id)
        if lock is None:
            raise SessionNotFoundError(session_id)
        with lock:
            session = self._load(session_id)
            updated = session.model_copy(
                update={"principal": principal, "login_state": None}
            )
            self._save(updated)
            return updated

    def destroy(self, session_id: str) -> None:
        """Remove the session. Destroying an absent session is a no-op."""
        lock = self._lock_for(session_id)
        if lock is None:
            return
        with lock:
            self._evict(session_id)

    def set_login_state(self, session_id: str, state: str) -> None:
        """Remember the anti-forgery state issued for an in-flight login."""
        lock = self._lock_for(session_id)
        if lock is None:
            raise SessionNotFoundError(session_id)
        with lock:
            session = self._load(session_id)
            self._save(session.model_copy(update={"login_state": state}))

    def pop_login_state(self, session_id: str) -> Optional[str]:
        """Return and clear the pending login state; None if there is none."""
        lock = self._lock_for(session_id)
        if lock is None:
            return None
        with lock:
            try:
                session = self._load(session_id)
            except SessionNotFoundError:
                return None
            if session.login_state is not None:
                self._save(session.model_copy(update={"login_state": None}))
            return session.login_state

    def sweep_expired(self) -> int:
        """Evict every expired session and return how many were removed."""
        now = self._clock()
        with self._registry_lock:
            expired = [
                session_id
                for session_id, session in self._sessions.items()
                if session.is_expired(now)
            ]
        removed = 0
        for session_id in expired:
            lock = self._lock_for(session_id)
            if lock is None:
                continue
            with lock:
                with self._registry_lock:
                    session = self._sessions.get(session_id)
                if session is not None and session.is_expired(self._clock()):
                    self._evict(session_id)
                    removed += 1
        if removed:
            logger.info(f"Swept {removed} expired sessions")
        return removed
