"""In-memory session store.

Sessions live only as long as the process; nothing is persisted.
"""

from __future__ import annotations

import logging
import threading

import config
from models import Session

logger = logging.getLogger(__name__)


class SessionNotFoundError(Exception):
    """Raised when a session lookup fails."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class SessionLimitError(Exception):
    """Raised when creating a session would exceed the configured limit."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Session limit reached: {limit}")


class SessionStore:
    """In-memory store of keypad sessions."""

    def __init__(self, max_sessions: int | None = None) -> None:
        self.max_sessions = (
            config.MAX_SESSIONS if max_sessions is None else max_sessions
        )
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self) -> Session:
        """Create a session showing "0" with no pending operation."""
        with self._lock:
            if len(self._sessions) >= self.max_sessions:
                logger.warning("Session limit %d reached", self.max_sessions)
                raise SessionLimitError(self.max_sessions)
            session = Session()
            self._sessions[session.id] = session
        logger.info("Created session %s", session.id)
        return session

    def get(self, session_id: str) -> Session:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def press(self, session_id: str, keys: list[str]) -> Session:
        """Press *keys* on a session, one key at a time."""
        session = self.get(session_id)
        with self._lock:
            session.press(keys)
        return session

    def list(self, *, offset: int = 0, limit: int = 50) -> list[Session]:
        """List sessions, newest first."""
        items = list(self._sessions.values())
        items.sort(key=lambda s: s.created_at, reverse=True)
        return items[offset : offset + limit]

    def delete(self, session_id: str) -> Session:
        """Delete a session and return it."""
        with self._lock:
            session = self.get(session_id)
            del self._sessions[session_id]
        logger.info("Deleted session %s", session_id)
        return session

    def count(self) -> int:
        return len(self._sessions)

    def clear(self) -> None:
        """Remove all sessions (useful for testing)."""
        with self._lock:
            self._sessions.clear()
