"""
Session Store Module

Sessions are keyed by an opaque token and carry their own expiry. The store is
an explicit object handed to request handlers through a dependency, so tests
can swap in a fixed clock or another backing store.
"""
import threading
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Dict, Optional

from app.core.clock import Clock, SystemClock
from app.core.security import generate_session_token
from app.models.auth_models import AuthSession
from app.models.user import User


class SessionStore(ABC):
    """get/put/expire interface for authenticated sessions."""

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or SystemClock()

    @abstractmethod
    def put(self, session: AuthSession) -> None:
        ...

    @abstractmethod
    def get(self, token: str) -> Optional[AuthSession]:
        """The live session for ``token``, or None if unknown or expired."""
        ...

    @abstractmethod
    def expire(self, token: str) -> None:
        ...

    @abstractmethod
    def purge_expired(self) -> int:
        """Drop every expired session and return how many were dropped."""
        ...

    def open(self, user: User, ttl_minutes: int) -> AuthSession:
        """Create and store a new session for ``user``."""
        now = self.clock.now()
        session = AuthSession(
            token=generate_session_token(),
            user_id=user.id,
            username=user.username,
            role=user.role,
            expires=now + timedelta(minutes=ttl_minutes),
            created_at=now,
        )
        self.put(session)
        return session


class InMemorySessionStore(SessionStore):
    """Process-local sessions. Lost on restart."""

    def __init__(self, clock: Optional[Clock] = None):
        super().__init__(clock)
        self._sessions: Dict[str, AuthSession] = {}
        self._lock = threading.Lock()

    def put(self, session: AuthSession) -> None:
        with self._lock:
            self._sessions[session.token] = session

    def get(self, token: str) -> Optional[AuthSession]:
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if session.is_expired(self.clock.now()):
                del self._sessions[token]
                return None
            return session

    def expire(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)

    def purge_expired(self) -> int:
        now = self.clock.now()
        with self._lock:
            expired = [t for t, s in self._sessions.items() if s.is_expired(now)]
            for token in expired:
                del self._sessions[token]
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)
