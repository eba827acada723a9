# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header block parsing and response header rendering.

Request headers arrive as a raw newline-separated ``key:value`` block and are
only validated when a probe executes. Response headers are flattened into a
single ``key:values`` string per header so they can be stored as evidence.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..errors import ValidationError


def parse_header_block(block: str | None) -> list[tuple[str, str]]:
    """
    Split a raw header block into (name, value) pairs.

    Each non-blank line is split on ``:`` with trailing empty pieces dropped,
    and must leave exactly two pieces with an ASCII name; otherwise the whole
    block is rejected. So ``X-Empty:`` is invalid
    while ``X-A:1:`` reads as ``("X-A", "1")``.
    """
    if block is None or not block.strip():
        return []

    pairs: list[tuple[str, str]] = []
    for line in block.replace("\r", "").split("\n"):
        if not line.strip():
            continue
        tokens = line.strip().split(":")
        while tokens and not tokens[-1]:
            tokens.pop()
        if len(tokens) != 2 or not tokens[0].isascii():
            raise ValidationError(f"Invalid header line: {line}")
        pairs.append((tokens[0].strip(), tokens[1].strip()))
    return pairs


def render_response_headers(items: Iterable[tuple[str, str]]) -> str:
    """
    Render response headers as ``"key:values\\n"`` lines.

    Repeated names are grouped under their first occurrence and joined with
    ``", "``; order follows the iteration order of ``items``.
    """
    grouped: dict[str, list[str]] = {}
    for key, value in items:
        name = str(key).strip()
        if not name:
            continue
        grouped.setdefault(name, []).append(str(value).strip())
    return "".join(f"{name}:{', '.join(values)}\n" for name, values in grouped.items())


__all__ = ["parse_header_block", "render_response_headers"]
