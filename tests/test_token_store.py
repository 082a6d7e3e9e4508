import json

import pytest

from auth.models import TokenRecord
from auth.sessions import SessionStore
from auth.token_store import FileTokenStore, SessionTokenStore


@pytest.mark.asyncio
async def test_session_store_set_get() -> None:
    sessions = SessionStore()
    session = sessions.create()
    store = SessionTokenStore(sessions, session.session_id)
    record = TokenRecord("access", "refresh", "Bearer", 1234.0)

    await store.set(record)

    assert await store.get() == record
    assert sessions.get(session.session_id).tokens == record


@pytest.mark.asyncio
async def test_session_store_is_isolated_per_session() -> None:
    sessions = SessionStore()
    first = SessionTokenStore(sessions, sessions.create().session_id)
    second = SessionTokenStore(sessions, sessions.create().session_id)

    await first.set_access_token("first-access")

    assert await first.get_access_token() == "first-access"
    assert await second.get_access_token() is None


@pytest.mark.asyncio
async def test_session_store_lost_when_session_destroyed() -> None:
    sessions = SessionStore()
    session = sessions.create()
    store = SessionTokenStore(sessions, session.session_id)
    await store.set(TokenRecord("access", "refresh"))

    sessions.destroy(session.session_id)

    assert await store.get() is None


@pytest.mark.asyncio
async def test_session_store_clear() -> None:
    sessions = SessionStore()
    store = SessionTokenStore(sessions, sessions.create().session_id)
    await store.set(TokenRecord("access", "refresh"))

    await store.clear()

    assert await store.get_access_token() is None
    assert await store.get_refresh_token() is None


@pytest.mark.asyncio
async def test_individual_setters() -> None:
    sessions = SessionStore()
    store = SessionTokenStore(sessions, sessions.create().session_id)

    await store.set_access_token("access", token_type="bearer")
    await store.set_refresh_token("refresh")

    record = await store.get()
    assert record.access_token == "access"
    assert record.token_type == "bearer"
    assert record.refresh_token == "refresh"


@pytest.mark.asyncio
async def test_file_store_set_get(tmp_path) -> None:
    store = FileTokenStore(tmp_path / "tokens.json")

    await store.set_access_token("access")
    await store.set_refresh_token("refresh")

    assert await store.get_access_token() == "access"
    assert await store.get_refresh_token() == "refresh"


@pytest.mark.asyncio
async def test_file_store_writes_camel_case_json(tmp_path) -> None:
    path = tmp_path / "tokens.json"
    store = FileTokenStore(path)

    await store.set(TokenRecord("access", "refresh", "Bearer", 1234.0))

    assert json.loads(path.read_text(encoding="utf-8")) == {
        "accessToken": "access",
        "refreshToken": "refresh",
    }


@pytest.mark.asyncio
async def test_file_store_persists_across_instances(tmp_path) -> None:
    path = tmp_path / "tokens.json"
    await FileTokenStore(path).set(TokenRecord("access", "refresh"))

    reloaded = FileTokenStore(path)

    record = await reloaded.get()
    assert record.access_token == "access"
    assert record.refresh_token == "refresh"
    assert record.expires_at is None


@pytest.mark.asyncio
async def test_file_store_is_loaded_once(tmp_path) -> None:
    path = tmp_path / "tokens.json"
    path.write_text(json.dumps({"accessToken": "old"}), encoding="utf-8")
    store = FileTokenStore(path)

    path.write_text(json.dumps({"accessToken": "changed-on-disk"}), encoding="utf-8")

    assert await store.get_access_token() == "old"


@pytest.mark.asyncio
async def test_file_store_clear(tmp_path) -> None:
    path = tmp_path / "tokens.json"
    store = FileTokenStore(path)
    await store.set(TokenRecord("access", "refresh"))

    await store.clear()

    assert await store.get_access_token() is None
    assert json.loads(path.read_text(encoding="utf-8")) == {}
    assert await FileTokenStore(path).get() is None


@pytest.mark.asyncio
async def test_file_store_missing_file(tmp_path) -> None:
    store = FileTokenStore(tmp_path / "missing.json")

    assert await store.get() is None
    assert await store.get_access_token() is None


def test_file_store_rejects_non_object(tmp_path) -> None:
    path = tmp_path / "tokens.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(RuntimeError, match="expected top-level JSON object"):
        FileTokenStore(path)
