"""Peer configuration

Every field can be overridden from the environment. Sessions take an explicit
``PeerConfig``; ``get_config()`` is only the fallback when none is passed.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .exceptions import ConfigurationError

MALFORMED_POLICIES = ("drop", "raise")


def _get_env_float(key: str, default: float) -> float:
    value = os.environ.get(key)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            pass
    return default


def _get_env_int(key: str, default: int) -> int:
    value = os.environ.get(key)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            pass
    return default


def _get_env_bool(key: str, default: bool) -> bool:
    value = os.environ.get(key, "").lower()
    if value in ("true", "1", "yes", "on"):
        return True
    elif value in ("false", "0", "no", "off"):
        return False
    return default


@dataclass(frozen=True)
class PeerConfig:
    """Immutable peer configuration.

    Environment overrides:
    - PEERNET_RECONNECT_DELAY: seconds before a lost signaling link is rebuilt
    - PEERNET_HOST / PEERNET_PORT: WebSocket listen address
    - PEERNET_MAX_MSG_SIZE: largest accepted WebSocket frame in bytes
    - PEERNET_MALFORMED_POLICY: "drop" (log and discard) or "raise" (fail fast)
    - PEERNET_LOG_LEVEL, PEERNET_DEBUG
    """

    # ==================== Reconnect ====================
    reconnect_delay: float = field(
        default_factory=lambda: _get_env_float("PEERNET_RECONNECT_DELAY", 3.0)
    )

    # ==================== Transport ====================
    host: str = field(
        default_factory=lambda: os.environ.get("PEERNET_HOST", "127.0.0.1")
    )
    port: int = field(
        default_factory=lambda: _get_env_int("PEERNET_PORT", 9000)
    )
    max_message_size: int = field(
        default_factory=lambda: _get_env_int("PEERNET_MAX_MSG_SIZE", 65_536)
    )

    # ==================== Decoding ====================
    malformed_policy: str = field(
        default_factory=lambda: os.environ.get("PEERNET_MALFORMED_POLICY", "drop").lower()
    )

    # ==================== Logging / debug ====================
    log_level: str = field(
        default_factory=lambda: os.environ.get("PEERNET_LOG_LEVEL", "INFO")
    )
    debug_mode: bool = field(
        default_factory=lambda: _get_env_bool("PEERNET_DEBUG", False)
    )

    @classmethod
    def from_env(cls) -> PeerConfig:
        return cls()

    def validate(self) -> list[str]:
        """Return a list of problems, empty when the configuration is usable."""
        errors: list[str] = []
        if self.reconnect_delay < 0:
            errors.append(f"reconnect_delay must be >= 0, got {self.reconnect_delay}")
        if not 0 <= self.port <= 65535:
            errors.append(f"port must be within 0..65535, got {self.port}")
        if self.max_message_size <= 0:
            errors.append(f"max_message_size must be > 0, got {self.max_message_size}")
        if self.malformed_policy not in MALFORMED_POLICIES:
            errors.append(
                f"malformed_policy must be one of {MALFORMED_POLICIES}, got {self.malformed_policy!r}"
            )
        return errors

    def ensure_valid(self) -> PeerConfig:
        """Raise ConfigurationError for the first problem found."""
        errors = self.validate()
        if errors:
            key = errors[0].split(" ", 1)[0]
            raise ConfigurationError(errors[0], config_key=key)
        return self

    @property
    def fail_fast(self) -> bool:
        """True when malformed payloads should propagate instead of being dropped."""
        return self.malformed_policy == "raise"


_config: PeerConfig | None = None


def get_config() -> PeerConfig:
    """Return the lazily created default configuration."""
    global _config
    if _config is None:
        _config = PeerConfig.from_env()
    return _config


def reset_config() -> None:
    """Forget the default configuration (used by tests)."""
    global _config
    _config = None
