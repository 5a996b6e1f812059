"""Message kinds and the wire envelope

Wire format, delivered by transports as an already-decoded mapping:

    {
        "id": "packet_element",
        "data": { "internalId": "..." }
    }

``id`` names a registered ``MessageKind``; ``data`` is kind specific.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class Envelope:
    """The only valid wire shape: a kind name plus its payload."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Plain mapping handed to transports."""
        return {"id": self.id, "data": dict(self.data)}

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any]) -> Envelope:
        return cls(id=value["id"], data=value["data"])


class Message:
    """Base class for decoded protocol messages.

    Concrete variants expose the ``MessageKind`` they are encoded with.
    """

    @property
    def kind(self) -> MessageKind:
        raise NotImplementedError


@runtime_checkable
class Describable(Protocol):
    """Capability of messages that can render a human-readable description."""

    def describe(self) -> str: ...


Encoder = Callable[[Message], Envelope]
Decoder = Callable[[Envelope], Message]


@dataclass(frozen=True)
class MessageKind:
    """Describes one message kind: its unique name, encoder and decoder."""

    name: str
    encode: Encoder = field(repr=False)
    decode: Decoder = field(repr=False)
