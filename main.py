"""peernet command-line peer

Usage:
    peernet --id alice --port 9000
    peernet --id bob --port 9001 --connect ws://127.0.0.1:9000 --send box_1 --send box_2

Listens for one WebSocket peer, prints every decoded message, and optionally
dials another peer and sends ``packet_element`` messages to it.
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from rich.console import Console
from rich.markup import escape

from i18n import t as _t
from logging_config import setup_logging
from peernet import ConfigurationError, ElementMessage, Message, PeerConfig, PeerSession, ProtocolError
from peernet.events import ConnectionEvent, PeerEvent

logger = logging.getLogger(__name__)


class ConsoleSession(PeerSession):
    """Session that echoes applied messages to a rich console."""

    def __init__(self, *args, console: Console, **kwargs) -> None:
        self.console = console
        super().__init__(*args, **kwargs)

    def apply_message(self, message: Message) -> str:
        text = super().apply_message(message)
        self.console.print(_t("cli.received", text=text))
        return text
def build_config(args: argparse.Namespace) -> PeerConfig:
    """PeerConfig from the environment, with command-line values on top."""
    overrides = {}
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    return PeerConfig(**overrides).ensure_valid()


def logging_options(args: argparse.Namespace, config: PeerConfig) -> dict:
    """setup_logging() keyword arguments; debug mode forces DEBUG on the console too."""
    if config.debug_mode:
        return {"level": "DEBUG", "enable_console": True, "console_level": "DEBUG"}
    return {"level": args.log_level or config.log_level, "enable_console": args.console}


async def wait_open(session: PeerSession) -> str:
    """Wait for the peer's identity; a transport error before that is raised."""
    opened: asyncio.Future[str] = asyncio.get_running_loop().create_future()

    def on_open(identity: str) -> None:
        if not opened.done():
            opened.set_result(identity)

    def on_error(err: BaseException) -> None:
        if not opened.done():
            opened.set_exception(err)

    session.peer.on(PeerEvent.OPEN, on_open)
    session.peer.on(PeerEvent.ERROR, on_error)
    try:
        return await opened
    finally:
        session.peer.off(PeerEvent.OPEN, on_open)
        session.peer.off(PeerEvent.ERROR, on_error)


async def run_peer(args: argparse.Namespace, console: Console, config: PeerConfig | None = None) -> None:
    config = config or build_config(args)
    session = ConsoleSession(args.id, config=config, console=console)
    session.init()
    try:
        await wait_open(session)
        console.print(_t("cli.listening", identity=session.local_identity, address=session.peer.address))

        if args.connect:
            console.print(_t("cli.connecting", url=args.connect))
            wrapper = session.connect(args.connect)
            settled = asyncio.Event()
            wrapper.conn.on(ConnectionEvent.OPEN, settled.set)
            wrapper.conn.on(ConnectionEvent.CLOSE, settled.set)
            await settled.wait()
            for internal_id in args.send:
                message = ElementMessage(internal_id)
                if session.send(message):
                    console.print(_t("cli.sent", text=session.render(message)))
                else:
                    console.print(_t("cli.not_sent", text=session.render(message)))

        await asyncio.Event().wait()
    finally:
        session.destroy()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="peernet", description=_t("cli.description"))
    parser.add_argument("--id", default=None, help="peer identity (random when omitted)")
    parser.add_argument("--host", default=None, help="listen host (PEERNET_HOST, 127.0.0.1)")
    parser.add_argument("--port", type=int, default=None, help="listen port (PEERNET_PORT, 9000)")
    parser.add_argument("--connect", default=None, help="ws:// URL of a peer to dial")
    parser.add_argument(
        "--send", action="append", default=[], metavar="INTERNAL_ID",
        help="send a packet_element after connecting (repeatable)",
    )
    parser.add_argument("--log-level", default=None, help="log level for the log file (PEERNET_LOG_LEVEL)")
    parser.add_argument("--console", action="store_true", help="also log to stderr")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    console = Console()
    try:
        config = build_config(args)
    except ConfigurationError as e:
        console.print(_t("cli.failed", error=escape(str(e))))
        raise SystemExit(2) from e
    setup_logging(**logging_options(args, config))
    try:
        asyncio.run(run_peer(args, console, config))
    except KeyboardInterrupt:
        console.print(_t("cli.bye"))
    except ProtocolError as e:
        logger.error("Peer failed: %s", e)
        console.print(_t("cli.failed", error=escape(str(e))))
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
