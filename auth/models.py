from __future__ import annotations

import time
from dataclasses import dataclass


@dataclass(frozen=True)
class ClientCredentials:
    client_id: str
    client_secret: str
    redirect_uri: str


@dataclass
class TokenRecord:
    access_token: str
    refresh_token: str | None = None
    token_type: str = "Bearer"
    expires_at: float | None = None

    def is_usable(self) -> bool:
        return bool(self.access_token)

    @classmethod
    def from_token_response(cls, response, *, now: float | None = None) -> "TokenRecord":
        current = time.time() if now is None else now
        expires_at = None
        if response.expires_in is not None:
            expires_at = current + response.expires_in
        return cls(
            access_token=response.access_token,
            refresh_token=response.refresh_token,
            token_type=response.token_type or "Bearer",
            expires_at=expires_at,
        )


@dataclass
class PendingAuthorization:
    state: str
    code_verifier: str
    created_at: float


@dataclass
class Session:
    session_id: str
    created_at: float
    tokens: TokenRecord | None = None
