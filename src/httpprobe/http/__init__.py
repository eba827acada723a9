# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP probe exports."""

from .headers import parse_header_block, render_response_headers
from .url import normalize_probe_url, parse_probe_url
from .executor import FAILURE_PREFIX, ProbeExecutor

__all__ = [
    "FAILURE_PREFIX",
    "ProbeExecutor",
    "normalize_probe_url",
    "parse_header_block",
    "parse_probe_url",
    "render_response_headers",
]
