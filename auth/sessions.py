from __future__ import annotations

import secrets
import time

from auth.models import Session

SESSION_TTL_SECONDS = 24 * 60 * 60


class SessionStore:
    """In-memory server-side sessions keyed by the ``session_id`` cookie."""

    def __init__(self, *, ttl_seconds: int = SESSION_TTL_SECONDS, clock=time.time) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: dict[str, Session] = {}

    def create(self) -> Session:
        self.cleanup()
        session = Session(session_id=secrets.token_urlsafe(32), created_at=self._clock())
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str | None) -> Session | None:
        self.cleanup()
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def ensure(self, session_id: str) -> Session:
        session = self.get(session_id)
        if session is None:
            session = Session(session_id=session_id, created_at=self._clock())
            self._sessions[session_id] = session
        return session

    def destroy(self, session_id: str | None) -> None:
        if session_id:
            self._sessions.pop(session_id, None)

    def cleanup(self) -> None:
        expired_ids = [
            session_id
            for session_id, session in self._sessions.items()
            if self._is_expired(session)
        ]
        for session_id in expired_ids:
            del self._sessions[session_id]

    def __contains__(self, session_id: str) -> bool:
        return self.get(session_id) is not None

    def __len__(self) -> int:
        return len(self._sessions)

    def _is_expired(self, session: Session) -> bool:
        return self._clock() - session.created_at > self.ttl_seconds
