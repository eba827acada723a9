# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpprobe CLI."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from ..config import ProbeSettings, load_probe_settings
from ..errors import MeasurementError, NetworkError, error_category_to_reason
from ..log import setup_logging
from ..runtime import HttpProbe

CLI_TEXT_TRUNCATION_BYTES = 4096
TRUNCATION_MARKER = "...[truncated]"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run one bounded HTTP probe and print the captured evidence")
    parser.add_argument("url", help="Target URL (http:// is assumed when no scheme is given)")
    parser.add_argument("--method", default=None, help="HTTP method (default: get)")
    parser.add_argument(
        "--header",
        action="append",
        default=[],
        metavar="KEY:VALUE",
        help="Request header line; may be repeated",
    )
    parser.add_argument("--key", default=None, help="Measurement key attached to the result")
    parser.add_argument(
        "--max-body-bytes",
        type=int,
        default=None,
        help="Override the response body capture limit",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON instead of human-friendly summary",
    )
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification (useful for lab/self-signed targets)",
    )
    return parser


def _clip_utf8(text: str, limit: int) -> str:
    """Clip ``text`` to at most ``limit`` UTF-8 bytes, ending with a truncation marker."""
    raw = text.encode("utf-8")
    if len(raw) <= limit:
        return text
    room = max(0, limit - len(TRUNCATION_MARKER))
    return raw[:room].decode("utf-8", errors="ignore") + TRUNCATION_MARKER[: limit - room]


def _truncate_for_cli(value: Any, *, max_bytes: int) -> Any:
    if isinstance(value, str):
        return _clip_utf8(value, max_bytes)
    if isinstance(value, dict):
        return {k: _truncate_for_cli(v, max_bytes=max_bytes) for k, v in value.items()}
    if isinstance(value, list):
        return [_truncate_for_cli(v, max_bytes=max_bytes) for v in value]
    return value


def _print_json(data: dict[str, Any] | Any) -> None:
    payload = data.to_dict() if hasattr(data, "to_dict") else data
    json.dump(_truncate_for_cli(payload, max_bytes=CLI_TEXT_TRUNCATION_BYTES), sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def _pretty_print(result: dict[str, Any] | Any) -> None:
    payload = result.to_dict() if hasattr(result, "to_dict") else result
    if not isinstance(payload, dict):
        print(payload)
        return
    values = payload.get("values") or {}
    params = payload.get("parameters") or {}

    print(f"[httpprobe] {payload.get('task_progress', '-')}: {params.get('url', '-')}")
    print(f"Status code: {values.get('status_code', '-')}")
    print(f"Content-Length: {values.get('content_length', '-')}")
    print(f"Time (ms): {values.get('time_ms', '-')}")
    print(f"Body bytes captured: {values.get('body_len', 0)}")
    headers = values.get("headers") or ""
    if headers:
        print("Headers:")
        for line in headers.splitlines():
            print(f"  {line}")


def _apply_overrides(settings: ProbeSettings, args: argparse.Namespace) -> ProbeSettings:
    if args.ignore_ssl_errors:
        settings.verify_ssl = False
    if args.max_body_bytes is not None and args.max_body_bytes > 0:
        settings.max_body_bytes = args.max_body_bytes
    return settings


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = _apply_overrides(load_probe_settings(), args)
    probe = HttpProbe(settings)
    try:
        result = probe.run(
            args.url,
            method=args.method,
            headers="\n".join(args.header) or None,
            key=args.key,
        )
    except MeasurementError as exc:
        reason = error_category_to_reason(exc.category) if isinstance(exc, NetworkError) else "Invalid probe parameters"
        print(f"[httpprobe] FAILED ({reason}): {exc}", file=sys.stderr)
        return 1

    if args.json:
        _print_json(result)
    else:
        _pretty_print(result)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
