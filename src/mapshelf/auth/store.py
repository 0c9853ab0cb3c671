from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from mapshelf.api.models import User
from mapshelf.utils.log import logger


class SessionState(str, Enum):
    init = "INIT"
    authenticated = "AUTHENTICATED"
    anonymous = "ANONYMOUS"


@dataclass(frozen=True, slots=True)
class Session:
    user: User | None = None
    access_token: str | None = None
    is_loading: bool = True

    @property
    def state(self) -> SessionState:
        if self.user is not None:
            return SessionState.authenticated
        if self.is_loading:
            return SessionState.init
        return SessionState.anonymous

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


Listener = Callable[[Session], None]


class SessionTokenStore:
    """
    In-memory holder of the (user, access token) pair.

    Each mutation builds a new immutable Session and swaps it in with a single
    assignment, so readers always see a consistent pair. The access token is
    never written anywhere else.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._session = Session()
        self._listeners: list[Listener] = []

    def get(self) -> Session:
        return self._session

    @property
    def access_token(self) -> str | None:
        return self._session.access_token

    def set(self, user: User, access_token: str) -> Session:
        if user is None or not access_token:
            raise ValueError("user and access_token must be set together")
        with self._lock:
            self._session = Session(
                user=user, access_token=str(access_token), is_loading=self._session.is_loading
            )
            snap = self._session
        self._publish(snap)
        return snap

    def clear(self) -> Session:
        with self._lock:
            self._session = Session(user=None, access_token=None, is_loading=self._session.is_loading)
            snap = self._session
        self._publish(snap)
        return snap

    def set_loading(self, is_loading: bool) -> Session:
        with self._lock:
            cur = self._session
            if cur.is_loading == bool(is_loading):
                return cur
            self._session = Session(
                user=cur.user, access_token=cur.access_token, is_loading=bool(is_loading)
            )
            snap = self._session
        self._publish(snap)
        return snap

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, snap: Session) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for fn in listeners:
            try:
                fn(snap)
            except Exception:
                logger.exception("session.listener_failed", listener=getattr(fn, "__name__", repr(fn)))
