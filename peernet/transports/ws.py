"""WebSocket transport (websockets.asyncio)

Each peer listens on ``host:port``; a caller puts its own identity in the URL
path (``ws://host:port/<identity>``) so the accepting side can report who
connected. Frames are JSON text. A frame that is not JSON is delivered as the
raw string and left for the protocol layer to reject.
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from collections.abc import Coroutine
from typing import Any
from urllib.parse import quote, unquote

from websockets.asyncio.client import connect
from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosedError, WebSocketException

from ..events import ConnectionEvent, PeerEvent
from ..exceptions import TransportError
from ..transport import TransportConnection, TransportPeer

logger = logging.getLogger(__name__)


class _TaskOwner:
    """Keeps strong references to fire-and-forget tasks until they finish."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning("Background task failed: %s", task.exception())


class WebSocketConnection(_TaskOwner, TransportConnection):
    """One WebSocket, inbound or outbound."""

    def __init__(self, remote: str) -> None:
        _TaskOwner.__init__(self)
        TransportConnection.__init__(self)
        self._remote = remote
        self._ws: Any = None
        self._open = False
        self._closed = False
        self._dial_task: asyncio.Task | None = None

    @property
    def peer(self) -> str:
        return self._remote

    @property
    def open(self) -> bool:
        return self._open

    async def _dial(self, uri: str, max_size: int) -> None:
        try:
            ws = await connect(uri, max_size=max_size)
        except (OSError, TimeoutError, WebSocketException) as e:
            logger.warning("Dial %s failed: %s", uri, e)
            self.emit(ConnectionEvent.ERROR, TransportError(reason=str(e)))
            self._finish()
            return
        await self._run(ws)

    async def _run(self, ws: Any) -> None:
        """Pump frames until the socket closes."""
        self._ws = ws
        if self._closed:
            await ws.close()
            return
        self._open = True
        self.emit(ConnectionEvent.OPEN)
        try:
            async for raw in ws:
                self._dispatch(raw)
        except ConnectionClosedError as e:
            self.emit(ConnectionEvent.ERROR, e)
        except Exception as e:
            # a failing data handler tears this connection down
            logger.exception("Data handler failed for %s", self._remote)
            self.emit(ConnectionEvent.ERROR, e)
        finally:
            self._open = False
            await ws.close()
            self._finish()

    def _dispatch(self, raw: str | bytes) -> None:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            payload = raw
        self.emit(ConnectionEvent.DATA, payload)

    def send(self, payload: Any) -> None:
        if not self._open or self._ws is None:
            raise TransportError(reason=f"connection to {self._remote} is not open")
        self._spawn(self._ws.send(json.dumps(payload, ensure_ascii=False)))

    def close(self) -> None:
        if self._closed:
            return
        if self._ws is not None:
            self._spawn(self._ws.close())
            return
        # not running yet: _run sees _closed and shuts the socket
        if self._dial_task is not None:
            self._dial_task.cancel()
        self._finish()

    def _finish(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._open = False
        self.emit(ConnectionEvent.CLOSE)


class WebSocketPeer(_TaskOwner, TransportPeer):
    """Listening WebSocket endpoint that emits ``open`` once bound.

    Must be created while an asyncio loop is running.
    """

    def __init__(
        self,
        identity: str | None = None,
        *,
        host: str = "127.0.0.1",
        port: int = 9000,
        max_size: int = 65_536,
    ) -> None:
        _TaskOwner.__init__(self)
        TransportPeer.__init__(self)
        self._requested = identity
        self._id: str | None = None
        self.host = host
        self.port = port
        self.max_size = max_size
        self.destroyed = False
        self._server: Server | None = None
        self._connections: set[WebSocketConnection] = set()
        self._spawn(self._start())

    @property
    def id(self) -> str | None:
        return self._id

    @property
    def address(self) -> str:
        return f"ws://{self.host}:{self.port}"

    @property
    def listening(self) -> bool:
        return self._server is not None

    async def _start(self) -> None:
        try:
            self._server = await serve(self._handle, self.host, self.port, max_size=self.max_size)
        except OSError as e:
            logger.error("Cannot listen on %s:%s: %s", self.host, self.port, e)
            self.emit(PeerEvent.ERROR, TransportError(reason=str(e)))
            return
        if self.destroyed:
            self._server.close()
            self._server = None
            return
        sockets = list(self._server.sockets)
        if sockets:
            self.port = sockets[0].getsockname()[1]
        self._id = self._requested or str(uuid.uuid4())
        logger.info("WebSocket peer %s listening on %s", self._id, self.address)
        self.emit(PeerEvent.OPEN, self._id)

    async def _handle(self, ws: ServerConnection) -> None:
        path = ws.request.path.split("?", 1)[0]
        remote = unquote(path.lstrip("/"))
        if not remote:
            host, port = ws.remote_address[:2]
            remote = f"{host}:{port}"
        conn = WebSocketConnection(remote)
        self._track(conn)
        self.emit(PeerEvent.CONNECTION, conn)
        await conn._run(ws)

    def _track(self, conn: WebSocketConnection) -> None:
        self._connections.add(conn)
        conn.on(ConnectionEvent.CLOSE, lambda: self._connections.discard(conn))

    def connect(self, remote: str) -> WebSocketConnection:
        """Dial ``remote`` (a ``ws://`` URL)."""
        if self.destroyed:
            raise TransportError(reason="peer destroyed")
        uri = remote.rstrip("/")
        if self._id:
            uri = f"{uri}/{quote(self._id, safe='')}"
        conn = WebSocketConnection(remote)
        self._track(conn)
        conn._dial_task = self._spawn(conn._dial(uri, self.max_size))
        return conn

    def disconnect(self) -> None:
        """Stop listening; live connections stay up."""
        if self._server is None:
            return
        self._server.close(close_connections=False)
        self._server = None
        logger.info("WebSocket peer %s stopped listening", self._id)
        self.emit(PeerEvent.DISCONNECTED)

    def destroy(self) -> None:
        if self.destroyed:
            return
        self.destroyed = True
        if self._server is not None:
            self._server.close()
            self._server = None
        for conn in list(self._connections):
            conn.close()
        self.emit(PeerEvent.CLOSE)
