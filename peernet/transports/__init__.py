"""Concrete transports: in-process (memory) and WebSocket."""

from .memory import MemoryBroker, MemoryConnection, MemoryPeer

__all__ = ["MemoryBroker", "MemoryPeer", "MemoryConnection"]
