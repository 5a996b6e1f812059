"""Tests for peernet.registry and the built-in element kind."""

from unittest.mock import MagicMock

import pytest

from peernet.exceptions import InvalidEnvelopeError, KindMismatchError, MalformedPayloadError
from peernet.kinds import Envelope, Message, MessageKind
from peernet.messages import ELEMENT, ElementMessage, default_kinds
from peernet.registry import MessageKindRegistry


@pytest.fixture
def registry() -> MessageKindRegistry:
    return MessageKindRegistry(default_kinds())


def _spy_kind(name: str) -> MessageKind:
    return MessageKind(name, MagicMock(name="encode"), MagicMock(name="decode"))


class TestRegister:
    def test_empty(self):
        reg = MessageKindRegistry()
        assert len(reg) == 0
        assert not reg.has("packet_element")
        assert reg.get("packet_element") is None

    def test_register_and_lookup(self, registry):
        assert registry.has("packet_element")
        assert "packet_element" in registry
        assert registry.get("packet_element") is ELEMENT
        assert registry.names() == ["packet_element"]

    def test_register_returns_registry(self):
        reg = MessageKindRegistry()
        assert reg.register(ELEMENT) is reg

    def test_last_write_wins(self, registry):
        replacement = _spy_kind("packet_element")
        registry.register(replacement)
        assert registry.get("packet_element") is replacement
        assert len(registry) == 1

    def test_unknown_name(self, registry):
        assert registry.get("nope") is None
        assert not registry.has("nope")


class TestIsValidEnvelope:
    def test_valid_mapping(self, registry):
        assert registry.is_valid_envelope({"id": "packet_element", "data": {"internalId": "x"}})

    def test_valid_envelope_object(self, registry):
        assert registry.is_valid_envelope(Envelope("packet_element", {"internalId": "x"}))

    def test_data_content_not_checked(self, registry):
        """Shape only: payload conformance is the kind's job."""
        assert registry.is_valid_envelope({"id": "packet_element", "data": {}})

    @pytest.mark.parametrize("value", [
        {"data": {"internalId": "x"}},
        {"id": "packet_element"},
        {"id": "not_a_kind", "data": {}},
        {"id": 42, "data": {}},
        {"id": ["packet_element"], "data": {}},
        "packet_element",
        None,
        42,
        ["packet_element", {}],
    ])
    def test_invalid(self, registry, value):
        assert registry.is_valid_envelope(value) is False


class TestEncode:
    def test_element_scenario(self, registry):
        envelope = registry.encode(ElementMessage("x1"))
        assert envelope == Envelope("packet_element", {"internalId": "x1"})
        assert envelope.to_dict() == {"id": "packet_element", "data": {"internalId": "x1"}}

    def test_delegates_to_message_kind(self):
        kind = _spy_kind("spy")
        kind.encode.return_value = Envelope("spy", {})

        class SpyMessage(Message):
            @property
            def kind(self):
                return kind

        reg = MessageKindRegistry()
        msg = SpyMessage()
        assert reg.encode(msg) == Envelope("spy", {})
        kind.encode.assert_called_once_with(msg)

    def test_wrong_message_for_element_kind(self):
        class Other(Message):
            @property
            def kind(self):
                return _spy_kind("other_kind")

        with pytest.raises(KindMismatchError) as exc:
            ELEMENT.encode(Other())
        assert exc.value.expected == "packet_element"
        assert exc.value.actual == "other_kind"
        assert "packet_element" in exc.value.message


class TestDecode:
    def test_element_scenario(self, registry):
        msg = registry.decode({"id": "packet_element", "data": {"internalId": "x1"}})
        assert isinstance(msg, ElementMessage)
        assert msg.internal_id == "x1"

    def test_accepts_envelope_object(self, registry):
        msg = registry.decode(Envelope("packet_element", {"internalId": "x2"}))
        assert msg == ElementMessage("x2")

    def test_extra_fields_ignored(self, registry):
        msg = registry.decode({"id": "packet_element", "data": {"internalId": "a", "extra": 1}})
        assert msg.internal_id == "a"

    def test_unknown_kind(self, registry):
        value = {"id": "not_a_kind", "data": {}}
        with pytest.raises(InvalidEnvelopeError) as exc:
            registry.decode(value)
        assert exc.value.value is value

    def test_unknown_kind_never_reaches_decoders(self):
        spy = _spy_kind("spy")
        reg = MessageKindRegistry([spy])
        with pytest.raises(InvalidEnvelopeError):
            reg.decode({"id": "not_a_kind", "data": {}})
        spy.decode.assert_not_called()

    def test_missing_data(self, registry):
        with pytest.raises(InvalidEnvelopeError):
            registry.decode({"id": "packet_element"})

    def test_missing_internal_id(self, registry):
        value = {"id": "packet_element", "data": {}}
        with pytest.raises(MalformedPayloadError) as exc:
            registry.decode(value)
        assert exc.value.envelope == Envelope("packet_element", {})
        assert "internalId" in exc.value.reason

    def test_non_string_internal_id(self, registry):
        with pytest.raises(MalformedPayloadError):
            registry.decode({"id": "packet_element", "data": {"internalId": 5}})

    def test_data_not_an_object(self, registry):
        with pytest.raises(MalformedPayloadError):
            registry.decode({"id": "packet_element", "data": "x1"})

    def test_malformed_is_not_invalid_envelope(self, registry):
        with pytest.raises(MalformedPayloadError) as exc:
            registry.decode({"id": "packet_element", "data": {}})
        assert not isinstance(exc.value, InvalidEnvelopeError)

    def test_kind_decoder_rejects_foreign_envelope(self):
        with pytest.raises(KindMismatchError) as exc:
            ELEMENT.decode(Envelope("other_kind", {"internalId": "x"}))
        assert exc.value.actual == "other_kind"

    def test_dispatches_by_id(self):
        spy = _spy_kind("spy")
        spy.decode.return_value = "decoded"
        reg = MessageKindRegistry([ELEMENT, spy])
        assert reg.decode({"id": "spy", "data": {"a": 1}}) == "decoded"
        spy.decode.assert_called_once_with(Envelope("spy", {"a": 1}))


class TestElementMessage:
    def test_kind(self):
        assert ElementMessage("x").kind is ELEMENT

    def test_describe(self):
        assert ElementMessage("box_1").describe() == "ElementMessage box_1"

    def test_equality(self):
        assert ElementMessage("a") == ElementMessage("a")
        assert ElementMessage("a") != ElementMessage("b")

    def test_kind_is_immutable(self):
        with pytest.raises(AttributeError):
            ELEMENT.name = "renamed"
