"""Connection wrapper

Binds one transport connection's events to registry decode and session
dispatch, so the session never touches raw transport payloads.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .events import ConnectionEvent
from .exceptions import KindMismatchError, MalformedPayloadError

if TYPE_CHECKING:
    from .kinds import Message
    from .session import PeerSession
    from .transport import TransportConnection

logger = logging.getLogger(__name__)


class ConnectionWrapper:
    """Adapts one transport connection to protocol-level actions.

    Subscribes on construction; each data event is decoded and dispatched to
    completion before the transport delivers the next one.
    """

    def __init__(self, session: PeerSession, conn: TransportConnection) -> None:
        self.session = session
        self.conn = conn
        conn.on(ConnectionEvent.OPEN, self._on_open)
        conn.on(ConnectionEvent.DATA, self._on_data)
        conn.on(ConnectionEvent.CLOSE, self._on_close)
        conn.on(ConnectionEvent.ERROR, self._on_error)

    @property
    def peer(self) -> str:
        return self.conn.peer

    # ==================== transport events ====================

    def _on_open(self) -> None:
        logger.info("Connection open: peer=%s", self.peer)

    def _on_data(self, payload: Any) -> None:
        logger.debug("Connection data: peer=%s payload=%r", self.peer, payload)
        registry = self.session.registry
        if not registry.is_valid_envelope(payload):
            logger.warning("Unknown data received from %s: %r", self.peer, payload)
            return
        try:
            message = registry.decode(payload)
        except (MalformedPayloadError, KindMismatchError) as e:
            if self.session.config.fail_fast:
                raise
            logger.warning("Dropped undecodable envelope from %s: %s", self.peer, e)
            return
        self.session.apply_message(message)

    def _on_close(self) -> None:
        logger.info("Connection closed: peer=%s", self.peer)
        self.session.close_connection(self)

    def _on_error(self, err: BaseException) -> None:
        logger.error("Connection error: peer=%s error=%s", self.peer, err)

    # ==================== outbound ====================

    def send(self, message: Message) -> None:
        """Encode ``message`` and write the envelope to the transport."""
        envelope = self.session.registry.encode(message)
        self.conn.send(envelope.to_dict())

    def close(self) -> None:
        self.conn.close()

    def __repr__(self) -> str:
        return f"ConnectionWrapper(peer={self.peer!r})"
