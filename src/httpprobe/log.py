# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging setup for the probe engine and its CLI."""

from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "HTTPPROBE_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def resolve_log_level(level: str | None = None) -> int:
    """Map an explicit level name, or HTTPPROBE_LOG_LEVEL, to a logging level."""
    name = (level or os.getenv(LOG_LEVEL_ENV) or "WARNING").strip().upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.WARNING


def setup_logging(level: str | None = None) -> int:
    resolved = resolve_log_level(level)
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    # httpx reports every request at INFO.
    logging.getLogger("httpx").setLevel(max(resolved, logging.WARNING))
    return resolved


__all__ = ["LOG_LEVEL_ENV", "resolve_log_level", "setup_logging"]
