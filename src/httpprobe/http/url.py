# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers shared across probes."""

from __future__ import annotations

import httpx

from ..errors import ErrorCategory, NetworkError

_SUPPORTED_PREFIXES = ("http://", "https://")


def normalize_probe_url(url: str) -> str:
    """
    Prefix scheme-less targets with ``http://``.

    Example:
      example.com/path -> http://example.com/path
    """
    if url.startswith(_SUPPORTED_PREFIXES):
        return url
    return f"http://{url}"


def parse_probe_url(url: str) -> httpx.URL:
    """Parse a normalized probe url, raising NetworkError when it cannot be fetched."""
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError, ValueError) as exc:
        raise NetworkError(str(exc), category=ErrorCategory.INVALID_URL) from exc
    if parsed.scheme not in {"http", "https"}:
        raise NetworkError(f"Unknown protocol: {parsed.scheme}", category=ErrorCategory.INVALID_URL)
    if not parsed.host:
        raise NetworkError(f"No host in URL: {url}", category=ErrorCategory.INVALID_URL)
    return parsed


__all__ = ["normalize_probe_url", "parse_probe_url"]
