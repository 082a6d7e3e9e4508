from auth.pending import PendingAuthStore
from tests.oauth_helpers import FakeClock


def test_put_and_pop() -> None:
    store = PendingAuthStore()

    store.put("session-1", state="state-1", code_verifier="verifier-1")
    pending = store.pop("session-1")

    assert pending.state == "state-1"
    assert pending.code_verifier == "verifier-1"


def test_pop_consumes_entry_once() -> None:
    store = PendingAuthStore()
    store.put("session-1", state="state-1", code_verifier="verifier-1")

    assert store.pop("session-1") is not None
    assert store.pop("session-1") is None
    assert len(store) == 0


def test_pop_missing_key() -> None:
    store = PendingAuthStore()

    assert store.pop("missing") is None
    assert store.pop(None) is None


def test_entry_expires_after_ttl() -> None:
    clock = FakeClock()
    store = PendingAuthStore(ttl_seconds=600, clock=clock)
    store.put("session-1", state="state-1", code_verifier="verifier-1")

    clock.advance(601)

    assert store.pop("session-1") is None


def test_entry_valid_within_ttl() -> None:
    clock = FakeClock()
    store = PendingAuthStore(ttl_seconds=600, clock=clock)
    store.put("session-1", state="state-1", code_verifier="verifier-1")

    clock.advance(599)

    assert store.pop("session-1") is not None


def test_put_cleans_up_expired_entries() -> None:
    clock = FakeClock()
    store = PendingAuthStore(ttl_seconds=600, clock=clock)
    store.put("stale", state="s", code_verifier="v")
    clock.advance(9999)

    store.put("fresh", state="s", code_verifier="v")

    assert "stale" not in store
    assert "fresh" in store


def test_put_replaces_previous_attempt() -> None:
    store = PendingAuthStore()
    store.put("session-1", state="first", code_verifier="v1")

    store.put("session-1", state="second", code_verifier="v2")

    assert store.pop("session-1").state == "second"
