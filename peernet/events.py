"""Transport event names and the emitter mixin transports build on.

Handlers run synchronously, in subscription order, on the emitting thread
(the event loop). Exceptions raised by a handler propagate to the emitter so
the transport can decide what a failing callback means for its connection.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from enum import Enum
from typing import Any


class PeerEvent(str, Enum):
    """Events emitted by a transport peer."""

    OPEN = "open"                   # identity confirmed by the signaling side
    CONNECTION = "connection"       # incoming data connection
    CALL = "call"                   # incoming media connection
    CLOSE = "close"                 # peer destroyed
    DISCONNECTED = "disconnected"   # signaling link lost, peer still alive
    ERROR = "error"


class ConnectionEvent(str, Enum):
    """Events emitted by a transport data connection."""

    OPEN = "open"
    DATA = "data"
    CLOSE = "close"
    ERROR = "error"


EventHandler = Callable[..., Any]


class EventEmitter:
    """Mixin giving an object ``on`` / ``off`` / ``emit``."""

    def __init__(self) -> None:
        self._listeners: dict[Enum, list[EventHandler]] = defaultdict(list)

    def on(self, event: Enum, handler: EventHandler) -> None:
        self._listeners[event].append(handler)

    def off(self, event: Enum, handler: EventHandler) -> None:
        """Remove ``handler``; unknown handlers are ignored."""
        self._listeners[event] = [h for h in self._listeners[event] if h != handler]

    def listener_count(self, event: Enum) -> int:
        return len(self._listeners.get(event, ()))

    def emit(self, event: Enum, *args: Any) -> bool:
        """Call every handler of ``event``; returns False when nobody listens."""
        handlers = list(self._listeners.get(event, ()))
        for handler in handlers:
            handler(*args)
        return bool(handlers)
