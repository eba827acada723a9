# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe outcome model."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any

UNKNOWN_STATUS_CODE = 0
UNKNOWN_CONTENT_LENGTH = -1


@dataclass
class ProbeOutcome:
    """Evidence captured from one completed exchange, whatever its HTTP status."""

    status_code: int = UNKNOWN_STATUS_CODE
    content_length: int = UNKNOWN_CONTENT_LENGTH
    headers: str = ""
    body: bytes = b""
    elapsed_ms: int = 0
    data_consumed_delta: int = 0

    @property
    def headers_len(self) -> int:
        return len(self.headers)

    @property
    def body_len(self) -> int:
        return len(self.body)

    def to_values(self) -> dict[str, Any]:
        """Result values keyed as the measurement backend expects them."""
        values: dict[str, Any] = {
            "status_code": self.status_code,
            "content_length": self.content_length,
            "time_ms": self.elapsed_ms,
            "headers_len": self.headers_len,
            "body_len": self.body_len,
            "headers": self.headers,
        }
        if self.body_len > 0:
            values["body"] = base64.b64encode(self.body).decode("ascii")
        return values


__all__ = ["ProbeOutcome", "UNKNOWN_CONTENT_LENGTH", "UNKNOWN_STATUS_CODE"]
