"""Shared fakes: a manual clock and hand-driven transport objects."""

from __future__ import annotations

from typing import Any

import pytest

from peernet.config import PeerConfig
from peernet.events import ConnectionEvent, PeerEvent
from peernet.exceptions import TransportError
from peernet.session import PeerSession
from peernet.transport import TransportConnection, TransportPeer


class FakeTimer:
    def __init__(self, when: float, callback) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Scheduler whose time only moves through ``advance``."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[FakeTimer] = []

    def call_later(self, delay: float, callback) -> FakeTimer:
        timer = FakeTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = [t for t in self.pending if t.when <= self.now]
        for timer in due:
            self.timers.remove(timer)
            timer.callback()


class FakeConnection(TransportConnection):
    def __init__(self, peer: str = "remote") -> None:
        super().__init__()
        self._peer = peer
        self._open = True
        self.sent: list[Any] = []
        self.closed = False

    @property
    def peer(self) -> str:
        return self._peer

    @property
    def open(self) -> bool:
        return self._open

    def send(self, payload: Any) -> None:
        if not self._open:
            raise TransportError(reason="not open")
        self.sent.append(payload)

    def close(self) -> None:
        self.closed = True
        self._open = False

    # test helpers
    def receive(self, payload: Any) -> None:
        self.emit(ConnectionEvent.DATA, payload)

    def drop(self) -> None:
        self._open = False
        self.emit(ConnectionEvent.CLOSE)


class FakePeer(TransportPeer):
    def __init__(self, identity: str | None = None) -> None:
        super().__init__()
        self.requested = identity
        self._id: str | None = None
        self.dialed: list[str] = []
        self.destroyed = False

    @property
    def id(self) -> str | None:
        return self._id

    def connect(self, remote: str) -> FakeConnection:
        self.dialed.append(remote)
        return FakeConnection(remote)

    def disconnect(self) -> None:
        self.emit(PeerEvent.DISCONNECTED)

    def destroy(self) -> None:
        self.destroyed = True
        self.emit(PeerEvent.CLOSE)

    # test helpers
    def confirm(self, identity: str | None = None) -> None:
        self._id = identity or self.requested or "generated-id"
        self.emit(PeerEvent.OPEN, self._id)


class PeerFactory:
    """Records every peer it builds, in order."""

    def __init__(self) -> None:
        self.created: list[FakePeer] = []

    def __call__(self, identity: str | None) -> FakePeer:
        peer = FakePeer(identity)
        self.created.append(peer)
        return peer

    @property
    def latest(self) -> FakePeer:
        return self.created[-1]


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def peer_factory() -> PeerFactory:
    return PeerFactory()


@pytest.fixture
def config() -> PeerConfig:
    return PeerConfig(reconnect_delay=3.0, malformed_policy="drop")


@pytest.fixture
def session(peer_factory, scheduler, config) -> PeerSession:
    s = PeerSession("local-1", peer_factory=peer_factory, scheduler=scheduler, config=config)
    s.init()
    return s
