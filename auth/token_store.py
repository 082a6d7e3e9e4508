from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from auth.models import TokenRecord
from auth.sessions import SessionStore


class TokenStore(ABC):
    @abstractmethod
    async def get(self) -> TokenRecord | None:
        raise NotImplementedError

    @abstractmethod
    async def set(self, record: TokenRecord) -> None:
        raise NotImplementedError

    @abstractmethod
    async def clear(self) -> None:
        raise NotImplementedError

    async def get_access_token(self) -> str | None:
        record = await self.get()
        if record is None or not record.access_token:
            return None
        return record.access_token

    async def set_access_token(self, token: str, token_type: str = "Bearer") -> None:
        record = await self.get() or TokenRecord(access_token="")
        record.access_token = token
        record.token_type = token_type
        await self.set(record)

    async def get_refresh_token(self) -> str | None:
        record = await self.get()
        if record is None:
            return None
        return record.refresh_token or None

    async def set_refresh_token(self, token: str | None) -> None:
        record = await self.get() or TokenRecord(access_token="")
        record.refresh_token = token
        await self.set(record)


class SessionTokenStore(TokenStore):
    def __init__(self, sessions: SessionStore, session_id: str) -> None:
        self._sessions = sessions
        self.session_id = session_id

    async def get(self) -> TokenRecord | None:
        session = self._sessions.get(self.session_id)
        if session is None:
            return None
        return session.tokens

    async def set(self, record: TokenRecord) -> None:
        session = self._sessions.ensure(self.session_id)
        session.tokens = record

    async def clear(self) -> None:
        session = self._sessions.get(self.session_id)
        if session is not None:
            session.tokens = None


class FileTokenStore(TokenStore):
    """Process-wide token record persisted as ``{"accessToken", "refreshToken"}``.

    The file is read once at construction and rewritten on every mutation.
    There is no locking: concurrent writers race and the last one wins.
    """

    def __init__(self, path: str | Path = "tokens.json") -> None:
        self._path = Path(path)
        self._record = self._read()

    @property
    def path(self) -> Path:
        return self._path

    async def get(self) -> TokenRecord | None:
        return self._record

    async def set(self, record: TokenRecord) -> None:
        self._record = record
        self._write()

    async def clear(self) -> None:
        self._record = None
        self._write()

    def _read(self) -> TokenRecord | None:
        if not self._path.exists():
            return None

        raw = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise RuntimeError("Token store file is invalid; expected top-level JSON object.")

        access_token = raw.get("accessToken")
        if not isinstance(access_token, str) or not access_token:
            return None
        refresh_token = raw.get("refreshToken")
        return TokenRecord(
            access_token=access_token,
            refresh_token=refresh_token if isinstance(refresh_token, str) else None,
        )

    def _write(self) -> None:
        payload: dict[str, str] = {}
        if self._record is not None:
            if self._record.access_token:
                payload["accessToken"] = self._record.access_token
            if self._record.refresh_token:
                payload["refreshToken"] = self._record.refresh_token

        self._path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f"{self._path.name}.",
            suffix=".tmp",
            dir=self._path.parent,
        )
        tmp_path = Path(tmp_name)

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
            os.replace(tmp_path, self._path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
