from __future__ import annotations

import time

from auth.errors import ReauthenticationRequired, RefreshTokenError
from auth.models import TokenRecord
from auth.token_store import TokenStore
from kickproxy.constants import DEFAULT_REFRESH_BUFFER_SECONDS, LOGGER


def needs_refresh(record: TokenRecord, *, buffer_seconds: int, now: float) -> bool:
    if record.expires_at is None:
        return True
    return now > record.expires_at - buffer_seconds


class RefreshGate:
    def __init__(
        self,
        oauth_client,
        *,
        buffer_seconds: int = DEFAULT_REFRESH_BUFFER_SECONDS,
        clock=time.time,
    ) -> None:
        self.oauth_client = oauth_client
        self.buffer_seconds = buffer_seconds
        self._clock = clock

    async def ensure_fresh(self, store: TokenStore) -> TokenRecord:
        """Return a usable token record, refreshing it first when close to expiry.

        Raises ``ReauthenticationRequired`` when there is nothing to use, when
        a refresh is due but no refresh token is stored, or when the refresh
        itself is rejected. In the last case the store is cleared.
        """
        record = await store.get()
        if record is None or not record.is_usable():
            raise ReauthenticationRequired("No access token stored.")

        now = self._clock()
        if not needs_refresh(record, buffer_seconds=self.buffer_seconds, now=now):
            return record

        if not record.refresh_token:
            raise ReauthenticationRequired("Access token expiring and no refresh token stored.")

        LOGGER.info("Refreshing access token")
        try:
            refreshed = await self.oauth_client.refresh_access_token(record.refresh_token)
        except RefreshTokenError as error:
            LOGGER.warning("Token refresh failed: %s", error)
            await store.clear()
            raise ReauthenticationRequired(f"Token refresh failed: {error}") from error

        updated = TokenRecord.from_token_response(refreshed, now=now)
        if updated.refresh_token is None:
            updated.refresh_token = record.refresh_token
        await store.set(updated)
        return updated
