from __future__ import annotations

import threading

import pytest

from mapshelf.api.models import User
from mapshelf.auth.store import Session, SessionState, SessionTokenStore


def _user(uid: int = 1) -> User:
    return User(id=uid, email=f"u{uid}@example.com")


def test_fresh_store_is_init() -> None:
    snap = SessionTokenStore().get()
    assert snap == Session(user=None, access_token=None, is_loading=True)
    assert snap.state is SessionState.init


def test_set_and_clear_keep_pair_consistent() -> None:
    store = SessionTokenStore()
    store.set_loading(False)
    assert store.get().state is SessionState.anonymous

    store.set(_user(), "tok1")
    snap = store.get()
    assert snap.user is not None and snap.access_token == "tok1"
    assert snap.state is SessionState.authenticated
    assert store.access_token == "tok1"

    store.clear()
    snap = store.get()
    assert snap.user is None and snap.access_token is None
    assert snap.state is SessionState.anonymous


@pytest.mark.parametrize("user,token", [(None, "tok"), (_user(), None), (_user(), "")])
def test_set_requires_both(user, token) -> None:
    store = SessionTokenStore()
    with pytest.raises(ValueError):
        store.set(user, token)
    assert store.get().user is None


def test_snapshots_are_immutable() -> None:
    store = SessionTokenStore()
    snap = store.get()
    with pytest.raises(Exception):
        snap.access_token = "x"  # type: ignore[misc]
    store.set(_user(), "tok")
    assert snap.access_token is None


def test_subscribers_receive_each_snapshot_and_can_unsubscribe() -> None:
    store = SessionTokenStore()
    seen: list[Session] = []
    unsubscribe = store.subscribe(seen.append)

    store.set(_user(), "tok")
    store.set_loading(False)
    store.set_loading(False)  # no change, no publish
    store.clear()
    assert [s.access_token for s in seen] == ["tok", "tok", None]

    unsubscribe()
    store.set(_user(), "tok2")
    assert len(seen) == 3


def test_failing_listener_does_not_block_others() -> None:
    store = SessionTokenStore()
    seen: list[str | None] = []

    def _bad(_snap: Session) -> None:
        raise RuntimeError("render failed")

    store.subscribe(_bad)
    store.subscribe(lambda s: seen.append(s.access_token))
    store.set(_user(), "tok")
    assert seen == ["tok"]
    assert store.access_token == "tok"


def test_concurrent_readers_never_see_torn_pair() -> None:
    store = SessionTokenStore()
    torn: list[Session] = []
    stop = threading.Event()

    def _reader() -> None:
        while not stop.is_set():
            s = store.get()
            if (s.user is None) != (s.access_token is None):
                torn.append(s)

    t = threading.Thread(target=_reader)
    t.start()
    try:
        for i in range(2000):
            store.set(_user(i), f"tok{i}")
            store.clear()
    finally:
        stop.set()
        t.join()
    assert torn == []
