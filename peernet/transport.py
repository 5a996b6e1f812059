"""Transport contract

A transport peer owns the local identity on the signaling side and hands out
data connections; the protocol layer only subscribes to their events.

Peer events (``PeerEvent``): open(identity), connection(conn), call(media),
close(), disconnected(), error(err).
Connection events (``ConnectionEvent``): open(), data(payload), close(), error(err).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from .events import EventEmitter


class TransportConnection(EventEmitter, ABC):
    """One data channel to a remote peer."""

    @property
    @abstractmethod
    def peer(self) -> str:
        """Identity (or address) of the remote side."""
        raise NotImplementedError

    @property
    @abstractmethod
    def open(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def send(self, payload: Any) -> None:
        """Send one already-structured payload (the envelope mapping)."""
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError


class TransportPeer(EventEmitter, ABC):
    """The local end registered with the signaling service."""

    @property
    @abstractmethod
    def id(self) -> str | None:
        """Confirmed identity, None until ``open`` fired."""
        raise NotImplementedError

    @abstractmethod
    def connect(self, remote: str) -> TransportConnection:
        """Start an outbound data connection; it emits ``open`` once usable."""
        raise NotImplementedError

    @abstractmethod
    def disconnect(self) -> None:
        """Drop the signaling link but keep existing connections."""
        raise NotImplementedError

    @abstractmethod
    def destroy(self) -> None:
        """Close everything; emits ``close``."""
        raise NotImplementedError


PeerFactory = Callable[[str | None], TransportPeer]
