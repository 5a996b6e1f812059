"""Peer session

Owns the local peer identity, at most one active connection, and the
reconnect policy for a lost signaling link.

State (transport identity axis):
    UNINITIALIZED --open--> IDENTIFIED --disconnected--> DISCONNECTED
    DISCONNECTED --reconnect + open--> IDENTIFIED
    any --close--> CLOSED (terminal)

State (connection axis):
    NO_CONNECTION --connection--> CONNECTED --active conn closed--> NO_CONNECTION
    a second incoming connection while CONNECTED is ignored
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any

from i18n import t as _t

from .config import PeerConfig, get_config
from .connection import ConnectionWrapper
from .events import PeerEvent
from .exceptions import SessionStateError, TransportError
from .kinds import Describable, Message, MessageKind
from .messages import default_kinds
from .registry import MessageKindRegistry
from .timers import AsyncioScheduler, Scheduler, TimerHandle
from .transport import PeerFactory, TransportConnection, TransportPeer

logger = logging.getLogger(__name__)

MessageHandler = Callable[[Message], Any]


class SessionState(Enum):
    UNINITIALIZED = "uninitialized"
    IDENTIFIED = "identified"
    DISCONNECTED = "disconnected"
    CLOSED = "closed"


class ConnectionState(Enum):
    NO_CONNECTION = "no_connection"
    CONNECTED = "connected"


class PeerSession:
    """This process's peer.

    Args:
        identity: requested identity; the transport assigns one when None
        registry: registry to fill at ``init()`` (a fresh one by default)
        peer_factory: builds a transport peer from an identity; called again
            with the same identity on every reconnect
        scheduler: source of the one-shot reconnect timer
        config: reconnect delay and malformed-payload policy
        kinds: kinds registered by ``init()`` (``default_kinds()`` by default)
    """

    def __init__(
        self,
        identity: str | None = None,
        *,
        registry: MessageKindRegistry | None = None,
        peer_factory: PeerFactory | None = None,
        scheduler: Scheduler | None = None,
        config: PeerConfig | None = None,
        kinds: Iterable[MessageKind] | None = None,
    ) -> None:
        self.config = config or get_config()
        self._registry = registry if registry is not None else MessageKindRegistry()
        self._kinds = list(kinds) if kinds is not None else None
        self._initialized = False

        self._peer_factory = peer_factory or self._default_peer_factory
        self._scheduler = scheduler or AsyncioScheduler()
        self._reconnect_timer: TimerHandle | None = None

        self._requested_identity = identity
        self._local_identity: str | None = None
        self._state = SessionState.UNINITIALIZED
        self._active: ConnectionWrapper | None = None
        self._handlers: dict[str, MessageHandler] = {}

        self._peer: TransportPeer | None = None
        self._bindings: list[tuple[PeerEvent, Callable[..., None]]] = [
            (PeerEvent.OPEN, self._on_open),
            (PeerEvent.CONNECTION, self._on_connection),
            (PeerEvent.CALL, self._on_call),
            (PeerEvent.CLOSE, self._on_close),
            (PeerEvent.DISCONNECTED, self._on_disconnected),
            (PeerEvent.ERROR, self._on_error),
        ]
        self._attach(self._peer_factory(identity))

    def _default_peer_factory(self, identity: str | None) -> TransportPeer:
        from .transports.ws import WebSocketPeer

        return WebSocketPeer(
            identity,
            host=self.config.host,
            port=self.config.port,
            max_size=self.config.max_message_size,
        )

    def _attach(self, peer: TransportPeer) -> None:
        """Bind session handlers to ``peer``, unbinding the previous peer."""
        if self._peer is not None:
            for event, handler in self._bindings:
                self._peer.off(event, handler)
        self._peer = peer
        for event, handler in self._bindings:
            peer.on(event, handler)

    # ==================== read-only state ====================

    @property
    def peer(self) -> TransportPeer | None:
        return self._peer

    @property
    def registry(self) -> MessageKindRegistry:
        return self._registry

    @property
    def local_identity(self) -> str | None:
        return self._local_identity

    @property
    def active_connection(self) -> ConnectionWrapper | None:
        return self._active

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def connection_state(self) -> ConnectionState:
        if self._active is None:
            return ConnectionState.NO_CONNECTION
        return ConnectionState.CONNECTED

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def reconnect_pending(self) -> bool:
        return self._reconnect_timer is not None

    # ==================== setup ====================

    def init(self) -> None:
        """Register every known message kind. Must run exactly once."""
        if self._initialized:
            raise SessionStateError(
                _t("exc.already_initialized"),
                current_state="initialized",
                expected_state="uninitialized",
            )
        kinds = self._kinds if self._kinds is not None else default_kinds()
        for kind in kinds:
            self._registry.register(kind)
        self._initialized = True
        logger.info("Session initialized: kinds=%s", self._registry.names())

    def on(self, kind_name: str, handler: MessageHandler) -> None:
        """Route decoded messages of ``kind_name`` to ``handler``."""
        self._handlers[kind_name] = handler

    # ==================== transport peer events ====================

    def _on_open(self, identity: str) -> None:
        logger.info("Peer open: %s", identity)
        if self._state is SessionState.CLOSED:
            return
        self._local_identity = identity
        self._state = SessionState.IDENTIFIED

    def _on_connection(self, conn: TransportConnection) -> None:
        if self._active is not None:
            logger.debug("Ignoring connection from %s: %s is active", conn.peer, self._active.peer)
            return
        self._active = ConnectionWrapper(self, conn)
        logger.info("Peer connection: %s", conn.peer)

    def _on_call(self, media: Any) -> None:
        logger.info("Peer call: %r", media)

    def _on_close(self) -> None:
        logger.info("Peer close")
        self._cancel_reconnect()
        self._state = SessionState.CLOSED

    def _on_disconnected(self) -> None:
        logger.info("Peer disconnected")
        if self._state is SessionState.CLOSED:
            return
        self._state = SessionState.DISCONNECTED
        self._schedule_reconnect()

    def _on_error(self, err: BaseException) -> None:
        logger.error("Peer error: %s", err)

    # ==================== reconnect ====================

    def _schedule_reconnect(self) -> None:
        if self._reconnect_timer is not None:
            logger.debug("Replacing pending reconnect")
            self._reconnect_timer.cancel()
        self._reconnect_timer = self._scheduler.call_later(
            self.config.reconnect_delay, self._reconnect
        )
        logger.info("Reconnect scheduled in %.1fs", self.config.reconnect_delay)

    def _cancel_reconnect(self) -> None:
        if self._reconnect_timer is not None:
            self._reconnect_timer.cancel()
            self._reconnect_timer = None

    def _reconnect(self) -> None:
        self._reconnect_timer = None
        if self._state is SessionState.CLOSED:
            return
        identity = self._local_identity or self._requested_identity
        logger.info("Reconnecting peer: %s", identity)
        try:
            peer = self._peer_factory(identity)
        except Exception:
            logger.exception("Reconnect failed, retrying in %.1fs", self.config.reconnect_delay)
            self._schedule_reconnect()
            return
        self._attach(peer)

    # ==================== protocol ====================

    @staticmethod
    def render(message: Message) -> str:
        """Human-readable form of ``message``."""
        if isinstance(message, Describable):
            return message.describe()
        return repr(message)

    def apply_message(self, message: Message) -> str:
        """Handle one decoded message; override to plug in game logic.

        Calls the handler registered for the message's kind, if any, and logs
        the rendered message. Returns the rendered text.
        """
        handler = self._handlers.get(message.kind.name)
        if handler is not None:
            handler(message)
        text = self.render(message)
        logger.info("%s", text)
        return text

    def close_connection(self, wrapper: ConnectionWrapper) -> None:
        """Release ``wrapper`` if it is the active connection; no-op otherwise."""
        if self._active is not wrapper:
            logger.debug("Ignoring close of inactive connection: %r", wrapper)
            return
        self._active = None
        logger.info("Peer remove connection: %s", wrapper.peer)

    # ==================== outbound ====================

    def connect(self, remote: str) -> ConnectionWrapper:
        """Open an outbound connection unless one is already active."""
        if self._active is not None:
            logger.info("Connection to %s already active, not dialing %s", self._active.peer, remote)
            return self._active
        self._active = ConnectionWrapper(self, self._peer.connect(remote))
        logger.info("Peer dialing: %s", remote)
        return self._active

    def send(self, message: Message) -> bool:
        """Send through the active connection; False when there is none."""
        if self._active is None:
            logger.warning("No active connection, cannot send %r", message)
            return False
        try:
            self._active.send(message)
        except TransportError as e:
            logger.warning("Send failed: %s", e)
            return False
        return True

    def destroy(self) -> None:
        """Tear down the transport peer; the session ends up CLOSED.

        The active connection is closed first: after a reconnect it belongs to
        a replaced peer that the new one does not own.
        """
        self._cancel_reconnect()
        active = self._active
        if active is not None:
            active.close()
            self.close_connection(active)
        if self._peer is not None:
            self._peer.destroy()
