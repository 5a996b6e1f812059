"""Message kind registry

Maps kind names to ``MessageKind`` descriptors and dispatches encode/decode by
name. The registry guarantees the envelope shape and that the kind is known;
each kind guarantees its own payload.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .exceptions import InvalidEnvelopeError
from .kinds import Envelope, Message, MessageKind

logger = logging.getLogger(__name__)


class MessageKindRegistry:
    """Name → MessageKind mapping.

    Built once while a session initializes and only read afterwards, so all
    connection wrappers of a session can share it.
    """

    def __init__(self, kinds: Iterable[MessageKind] = ()) -> None:
        self._kinds: dict[str, MessageKind] = {}
        for kind in kinds:
            self.register(kind)

    def register(self, kind: MessageKind) -> MessageKindRegistry:
        """Add or replace the entry for ``kind.name`` (last write wins)."""
        if kind.name in self._kinds:
            logger.debug("Replacing message kind: %s", kind.name)
        self._kinds[kind.name] = kind
        return self

    def has(self, name: str) -> bool:
        return name in self._kinds

    def get(self, name: str) -> MessageKind | None:
        """Return the descriptor, or None when ``name`` is not registered."""
        return self._kinds.get(name)

    def names(self) -> list[str]:
        return list(self._kinds)

    def encode(self, message: Message) -> Envelope:
        """Encode through the message's own kind."""
        return message.kind.encode(message)

    def decode(self, envelope: Envelope | Mapping[str, Any]) -> Message:
        """Validate ``envelope`` and decode it with the kind named by its id.

        Raises:
            InvalidEnvelopeError: missing id/data, or id not registered
        """
        if not self.is_valid_envelope(envelope):
            raise InvalidEnvelopeError(value=envelope)
        if not isinstance(envelope, Envelope):
            envelope = Envelope.from_mapping(envelope)
        return self._kinds[envelope.id].decode(envelope)

    def is_valid_envelope(self, value: Any) -> bool:
        """True iff ``value`` carries both ``id`` and ``data`` and ``id`` is registered."""
        if isinstance(value, Envelope):
            kind_name = value.id
        elif isinstance(value, Mapping):
            if "id" not in value or "data" not in value:
                return False
            kind_name = value["id"]
        else:
            return False
        return isinstance(kind_name, str) and self.has(kind_name)

    def __contains__(self, name: object) -> bool:
        return name in self._kinds

    def __len__(self) -> int:
        return len(self._kinds)

    def __repr__(self) -> str:
        return f"MessageKindRegistry({sorted(self._kinds)})"
