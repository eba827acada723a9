# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for httpprobe."""

import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from .version import __version__

DEFAULT_USER_AGENT = f"httpprobe/{__version__}"
MAX_BODY_BYTES = 1024 * 1024
READ_BUFFER_SIZE = 1024
DEFAULT_DURATION_MS = 5000

T = TypeVar("T")

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _env(name: str, default: T, convert: Callable[[str], T]) -> T:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return convert(raw.strip())
    except ValueError:
        return default


def _positive_int(raw: str) -> int:
    value = int(raw)
    if value <= 0:
        raise ValueError(f"expected a positive integer, got {value}")
    return value


def _flag(raw: str) -> bool:
    return raw.lower() in _TRUTHY


@dataclass
class ProbeSettings:
    """Probe execution limits and HTTP client defaults."""

    max_body_bytes: int = MAX_BODY_BYTES
    read_buffer_size: int = READ_BUFFER_SIZE
    default_duration_ms: int = DEFAULT_DURATION_MS
    timeout: float = 10.0
    allow_redirects: bool = True
    verify_ssl: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    device_id: str | None = None

    @classmethod
    def from_env(cls) -> "ProbeSettings":
        """Create settings from environment variables (evaluated at call time)."""
        return cls(
            max_body_bytes=_env("HTTPPROBE_MAX_BODY_BYTES", cls.max_body_bytes, _positive_int),
            read_buffer_size=_env("HTTPPROBE_READ_BUFFER_SIZE", cls.read_buffer_size, _positive_int),
            default_duration_ms=max(0, _env("HTTPPROBE_DEFAULT_DURATION_MS", cls.default_duration_ms, int)),
            timeout=_env("HTTPPROBE_HTTP_TIMEOUT", cls.timeout, float),
            allow_redirects=_env("HTTPPROBE_HTTP_REDIRECTS", cls.allow_redirects, _flag),
            verify_ssl=_env("HTTPPROBE_HTTP_VERIFY_SSL", cls.verify_ssl, _flag),
            user_agent=_env("HTTPPROBE_USER_AGENT", cls.user_agent, str),
            device_id=os.getenv("HTTPPROBE_DEVICE_ID") or None,
        )


def load_probe_settings() -> ProbeSettings:
    """Load probe settings from environment with sensible defaults."""
    return ProbeSettings.from_env()
