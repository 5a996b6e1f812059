"""Protocol exceptions
Error taxonomy for envelope validation, payload decoding, transports and sessions.
"""

from __future__ import annotations

from typing import Any

from i18n import t as _t


class ProtocolError(Exception):
    """Base class for every error raised by the protocol layer.

    Carries a human-readable message plus a ``details`` dict so log lines can
    show what went wrong without formatting at the raise site.
    """

    def __init__(self, message: str | None = None, details: dict | None = None):
        """Initialize the error.

        Args:
            message: error message (localized generic text when omitted)
            details: extra context (optional)
        """
        if message is None:
            message = _t("exc.protocol_error")
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# ==================== Decode errors ====================


class InvalidEnvelopeError(ProtocolError):
    """Raised when a value is not ``{id, data}`` or names an unregistered kind.

    The registry raises this before any kind-specific decoder runs.
    """

    def __init__(self, message: str | None = None, value: Any = None):
        if message is None:
            message = _t("exc.invalid_envelope")
        super().__init__(message, {"value": value})
        self.value = value


class MalformedPayloadError(ProtocolError):
    """Raised by a kind decoder when ``data`` lacks the fields it needs."""

    def __init__(
        self,
        message: str | None = None,
        envelope: Any = None,
        reason: str | None = None,
    ):
        if message is None:
            message = _t("exc.malformed_payload")
        details = {"envelope": envelope}
        if reason:
            details["reason"] = reason
        super().__init__(message, details)
        self.envelope = envelope
        self.reason = reason


class KindMismatchError(ProtocolError):
    """Raised when a message or envelope is handed to the wrong kind."""

    def __init__(
        self,
        message: str | None = None,
        expected: str | None = None,
        actual: str | None = None,
    ):
        if message is None:
            message = _t("exc.kind_mismatch", expected=expected, actual=actual)
        super().__init__(message, {"expected": expected, "actual": actual})
        self.expected = expected
        self.actual = actual


# ==================== Transport / session errors ====================


class TransportError(ProtocolError):
    """Misuse of a transport object, e.g. sending on a connection that is not open."""

    def __init__(self, message: str | None = None, reason: str | None = None):
        if message is None:
            message = _t("exc.transport_error")
        details = {}
        if reason:
            details["reason"] = reason
        super().__init__(message, details)
        self.reason = reason


class SessionStateError(ProtocolError):
    """Raised when a session operation is not allowed in its current state."""

    def __init__(
        self,
        message: str | None = None,
        current_state: str | None = None,
        expected_state: str | None = None,
    ):
        if message is None:
            message = _t("exc.session_state")
        details = {}
        if current_state:
            details["current_state"] = current_state
        if expected_state:
            details["expected_state"] = expected_state
        super().__init__(message, details)
        self.current_state = current_state
        self.expected_state = expected_state


class ConfigurationError(ProtocolError):
    """Raised for an invalid configuration value."""

    def __init__(self, message: str | None = None, config_key: str | None = None):
        if message is None:
            message = _t("exc.config_error")
        details = {}
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details)
        self.config_key = config_key
