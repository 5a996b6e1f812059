"""Peer-to-peer typed message protocol

- MessageKind / MessageKindRegistry: named kinds with encode/decode
- ConnectionWrapper: binds one transport connection to registry dispatch
- PeerSession: single active connection plus reconnect policy
"""

from .config import PeerConfig, get_config, reset_config
from .connection import ConnectionWrapper
from .exceptions import (
    ConfigurationError,
    InvalidEnvelopeError,
    KindMismatchError,
    MalformedPayloadError,
    ProtocolError,
    SessionStateError,
    TransportError,
)
from .kinds import Describable, Envelope, Message, MessageKind
from .messages import ELEMENT, ElementMessage, default_kinds
from .registry import MessageKindRegistry
from .session import ConnectionState, PeerSession, SessionState

__all__ = [
    "PeerConfig", "get_config", "reset_config",
    "Envelope", "Message", "MessageKind", "Describable",
    "MessageKindRegistry",
    "ELEMENT", "ElementMessage", "default_kinds",
    "ConnectionWrapper",
    "PeerSession", "SessionState", "ConnectionState",
    "ProtocolError", "InvalidEnvelopeError", "MalformedPayloadError",
    "KindMismatchError", "TransportError", "SessionStateError",
    "ConfigurationError",
]

__version__ = "0.1.0"
