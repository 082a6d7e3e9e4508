from __future__ import annotations

import time

from auth.models import PendingAuthorization

PENDING_AUTH_TTL_SECONDS = 600


class PendingAuthStore:
    """Login attempts waiting for the provider callback.

    Entries are keyed by session id, consumed at most once and dropped after
    ``ttl_seconds``.
    """

    def __init__(self, *, ttl_seconds: int = PENDING_AUTH_TTL_SECONDS, clock=time.time) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._pending: dict[str, PendingAuthorization] = {}

    def put(self, key: str, *, state: str, code_verifier: str) -> PendingAuthorization:
        self.cleanup()
        pending = PendingAuthorization(
            state=state,
            code_verifier=code_verifier,
            created_at=self._clock(),
        )
        self._pending[key] = pending
        return pending

    def pop(self, key: str | None) -> PendingAuthorization | None:
        self.cleanup()
        if not key:
            return None
        return self._pending.pop(key, None)

    def cleanup(self) -> None:
        cutoff = self._clock() - self.ttl_seconds
        expired_keys = [
            key for key, pending in self._pending.items() if pending.created_at < cutoff
        ]
        for key in expired_keys:
            del self._pending[key]

    def __contains__(self, key: str) -> bool:
        return key in self._pending

    def __len__(self) -> int:
        return len(self._pending)
