from auth.sessions import SessionStore
from tests.oauth_helpers import FakeClock


def test_create_and_get() -> None:
    sessions = SessionStore()

    session = sessions.create()

    assert sessions.get(session.session_id) is session
    assert session.session_id in sessions


def test_session_ids_are_unique() -> None:
    sessions = SessionStore()

    ids = {sessions.create().session_id for _ in range(100)}

    assert len(ids) == 100


def test_get_missing_or_empty() -> None:
    sessions = SessionStore()

    assert sessions.get("missing") is None
    assert sessions.get(None) is None
    assert sessions.get("") is None


def test_session_expires() -> None:
    clock = FakeClock()
    sessions = SessionStore(ttl_seconds=60, clock=clock)
    session = sessions.create()

    clock.advance(61)

    assert sessions.get(session.session_id) is None


def test_ensure_recreates_with_same_id() -> None:
    sessions = SessionStore()

    session = sessions.ensure("known-id")

    assert session.session_id == "known-id"
    assert sessions.ensure("known-id") is session


def test_destroy() -> None:
    sessions = SessionStore()
    session = sessions.create()

    sessions.destroy(session.session_id)
    sessions.destroy(None)

    assert sessions.get(session.session_id) is None


def test_expired_sessions_are_swept_on_create() -> None:
    clock = FakeClock()
    sessions = SessionStore(ttl_seconds=60, clock=clock)
    for _ in range(50):
        sessions.create()

    clock.advance(61)
    fresh = sessions.create()

    assert len(sessions) == 1
    assert fresh.session_id in sessions


def test_expired_sessions_are_swept_on_get() -> None:
    clock = FakeClock()
    sessions = SessionStore(ttl_seconds=60, clock=clock)
    sessions.create()
    clock.advance(30)
    survivor = sessions.create()

    clock.advance(31)

    assert sessions.get(survivor.session_id) is survivor
    assert len(sessions) == 1
