"""In-process transport

``MemoryBroker`` stands in for the signaling service: it hands out identities
and links connection pairs. Events are delivered with ``loop.call_soon`` so
listeners attached right after construction never miss them.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any

from ..events import ConnectionEvent, PeerEvent
from ..exceptions import TransportError
from ..transport import TransportConnection, TransportPeer

logger = logging.getLogger(__name__)


class MemoryBroker:
    """Registry of live in-memory peers keyed by identity."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self.peers: dict[str, MemoryPeer] = {}

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def peer(self, identity: str | None = None) -> MemoryPeer:
        """Peer factory usable as a session ``peer_factory``."""
        return MemoryPeer(identity, broker=self)

    def _register(self, peer: MemoryPeer, identity: str | None) -> None:
        identity = identity or str(uuid.uuid4())
        current = self.peers.get(identity)
        if current is not None and current is not peer and current.signaling:
            self.loop.call_soon(
                peer.emit, PeerEvent.ERROR, TransportError(reason=f"identity taken: {identity}")
            )
            return
        self.peers[identity] = peer
        peer._confirm(identity)

    def _unregister(self, peer: MemoryPeer) -> None:
        if peer.id is not None and self.peers.get(peer.id) is peer:
            del self.peers[peer.id]

    def drop(self, identity: str) -> None:
        """Simulate loss of the signaling link for ``identity``."""
        peer = self.peers.get(identity)
        if peer is not None:
            peer.disconnect()

    def _dial(self, source: MemoryPeer, remote: str) -> MemoryConnection:
        local = MemoryConnection(remote, self.loop)
        target = self.peers.get(remote)
        if target is None or not target.signaling:
            self.loop.call_soon(
                local._fail, TransportError(reason=f"peer unavailable: {remote}")
            )
            return local
        far = MemoryConnection(source.id or "", self.loop)
        local._link(far)
        far._link(local)
        self.loop.call_soon(target._accept, far)
        self.loop.call_soon(far._mark_open)
        self.loop.call_soon(local._mark_open)
        return local


class MemoryConnection(TransportConnection):
    """One side of a linked in-memory connection pair."""

    def __init__(self, remote: str, loop: asyncio.AbstractEventLoop) -> None:
        super().__init__()
        self._remote = remote
        self._loop = loop
        self._other: MemoryConnection | None = None
        self._open = False
        self._closed = False

    @property
    def peer(self) -> str:
        return self._remote

    @property
    def open(self) -> bool:
        return self._open

    def _link(self, other: MemoryConnection) -> None:
        self._other = other

    def _mark_open(self) -> None:
        if self._closed:
            return
        self._open = True
        self.emit(ConnectionEvent.OPEN)

    def _fail(self, err: Exception) -> None:
        self.emit(ConnectionEvent.ERROR, err)
        self._finish()

    def _deliver(self, payload: Any) -> None:
        if self._open:
            self.emit(ConnectionEvent.DATA, payload)

    def send(self, payload: Any) -> None:
        if not self._open or self._other is None:
            raise TransportError(reason=f"connection to {self._remote} is not open")
        self._loop.call_soon(self._other._deliver, payload)

    def close(self) -> None:
        if self._closed:
            return
        self._finish()
        if self._other is not None:
            self._loop.call_soon(self._other.close)

    def _finish(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._open = False
        self.emit(ConnectionEvent.CLOSE)


class MemoryPeer(TransportPeer):
    """In-memory peer; registers with its broker on construction."""

    def __init__(self, identity: str | None = None, *, broker: MemoryBroker) -> None:
        super().__init__()
        self._broker = broker
        self._id: str | None = None
        self._requested = identity
        self.signaling = False
        self.destroyed = False
        self.connections: list[MemoryConnection] = []
        broker.loop.call_soon(broker._register, self, identity)

    @property
    def id(self) -> str | None:
        return self._id

    def _confirm(self, identity: str) -> None:
        self._id = identity
        self.signaling = True
        logger.debug("Memory peer registered: %s", identity)
        self.emit(PeerEvent.OPEN, identity)

    def _accept(self, conn: MemoryConnection) -> None:
        if self.destroyed:
            conn.close()
            return
        self.connections.append(conn)
        self.emit(PeerEvent.CONNECTION, conn)

    def connect(self, remote: str) -> MemoryConnection:
        if self.destroyed:
            raise TransportError(reason="peer destroyed")
        conn = self._broker._dial(self, remote)
        self.connections.append(conn)
        return conn

    def disconnect(self) -> None:
        if not self.signaling:
            return
        self.signaling = False
        self._broker._unregister(self)
        self.emit(PeerEvent.DISCONNECTED)

    def destroy(self) -> None:
        if self.destroyed:
            return
        self.destroyed = True
        self.signaling = False
        self._broker._unregister(self)
        for conn in list(self.connections):
            conn.close()
        self.emit(PeerEvent.CLOSE)
