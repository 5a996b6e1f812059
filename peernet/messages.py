"""Built-in message kinds

- packet_element: { "internalId": "<string>" } <-> ElementMessage
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import ValidationError

from .exceptions import KindMismatchError, MalformedPayloadError
from .kinds import Envelope, Message, MessageKind
from .models import ElementData, describe_validation_error

ELEMENT_KIND_NAME = "packet_element"


@dataclass(frozen=True)
class ElementMessage(Message):
    """References a scene/game element by its internal id."""

    internal_id: str

    @property
    def kind(self) -> MessageKind:
        return ELEMENT

    def describe(self) -> str:
        return f"ElementMessage {self.internal_id}"


def _kind_name_of(message: object) -> str:
    kind = getattr(message, "kind", None)
    return getattr(kind, "name", None) or type(message).__name__


def _encode_element(message: Message) -> Envelope:
    if not isinstance(message, ElementMessage):
        raise KindMismatchError(expected=ELEMENT_KIND_NAME, actual=_kind_name_of(message))
    return Envelope(id=ELEMENT_KIND_NAME, data={"internalId": message.internal_id})


def _decode_element(envelope: Envelope) -> ElementMessage:
    if envelope.id != ELEMENT_KIND_NAME:
        raise KindMismatchError(expected=ELEMENT_KIND_NAME, actual=envelope.id)
    try:
        data = ElementData.model_validate(envelope.data)
    except ValidationError as e:
        raise MalformedPayloadError(envelope=envelope, reason=describe_validation_error(e)) from e
    return ElementMessage(internal_id=data.internal_id)


ELEMENT = MessageKind(ELEMENT_KIND_NAME, _encode_element, _decode_element)


def default_kinds() -> list[MessageKind]:
    """Kinds a freshly initialized session registers."""
    return [ELEMENT]
