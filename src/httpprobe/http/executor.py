# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed bounded probe executor."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import httpx

from ..config import ProbeSettings, load_probe_settings
from ..errors import NetworkError, ResourceError, ValidationError, categorize_exception
from ..models.outcome import UNKNOWN_CONTENT_LENGTH, ProbeOutcome
from ..utils.traffic import PsutilTrafficCounter, TrafficCounter, consumed_since
from .headers import parse_header_block, render_response_headers
from .url import parse_probe_url

if TYPE_CHECKING:
    from ..models.spec import ProbeSpec

logger = logging.getLogger(__name__)

FAILURE_PREFIX = "Cannot get result from HTTP measurement because "


def _content_length(headers: httpx.Headers) -> int:
    raw = headers.get("content-length")
    if raw is None:
        return UNKNOWN_CONTENT_LENGTH
    try:
        return int(raw.strip())
    except ValueError:
        return UNKNOWN_CONTENT_LENGTH


def _header_bytes(text: str) -> bytes:
    try:
        return text.encode("latin-1")
    except UnicodeEncodeError:
        return text.encode("utf-8")


def _failure_causes(exc: BaseException) -> list[str]:
    """Collect the distinct messages along an exception's explicit cause chain."""
    causes: list[str] = []
    current: BaseException | None = exc
    while current is not None and len(causes) < 8:
        message = str(current) or type(current).__name__
        if message not in causes:
            causes.append(message)
        current = current.__cause__
    return causes


class ProbeExecutor:
    """
    Runs one HTTP exchange for a ProbeSpec and captures bounded evidence.

    The client and response live only for the duration of `execute()` and are
    closed on every exit path. Any HTTP status is a successful measurement;
    only transport and validation problems raise.
    """

    def __init__(
        self,
        settings: ProbeSettings | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
        traffic: TrafficCounter | None = None,
    ):
        self.settings = settings or load_probe_settings()
        self._transport = transport
        self.traffic = traffic or PsutilTrafficCounter()

    def execute(self, spec: ProbeSpec) -> ProbeOutcome:
        baseline = self.traffic.rx_tx_bytes()
        client: httpx.Client | None = None
        response: httpx.Response | None = None
        try:
            url = parse_probe_url(spec.url)
            client = self._open_client()
            request = client.build_request(spec.method, url, headers=self._request_headers(spec.headers))

            started = time.monotonic()
            response = client.send(request, stream=True)
            status_code = response.status_code
            content_length = _content_length(response.headers)
            headers = render_response_headers(response.headers.multi_items())
            body = self._read_body(response)
            elapsed_ms = max(0, int((time.monotonic() - started) * 1000))

            return ProbeOutcome(
                status_code=status_code,
                content_length=content_length,
                headers=headers,
                body=body,
                elapsed_ms=elapsed_ms,
                data_consumed_delta=consumed_since(self.traffic, baseline),
            )
        except ValidationError as exc:
            logger.error("%s", exc)
            raise
        except NetworkError as exc:
            logger.error("%s", exc)
            raise NetworkError(FAILURE_PREFIX + "\n".join(_failure_causes(exc)), category=exc.category) from exc
        except (httpx.HTTPError, httpx.StreamError, httpx.InvalidURL, OSError) as exc:
            logger.error("%s", exc)
            raise NetworkError(
                FAILURE_PREFIX + "\n".join(_failure_causes(exc)),
                category=categorize_exception(exc),
            ) from exc
        finally:
            self._release(response, client)

    def _open_client(self) -> httpx.Client:
        return httpx.Client(
            follow_redirects=self.settings.allow_redirects,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
            transport=self._transport,
        )

    def _request_headers(self, block: str | None) -> httpx.Headers:
        headers = httpx.Headers([(_header_bytes(name), _header_bytes(value)) for name, value in parse_header_block(block)])
        if "user-agent" not in headers:
            headers["User-Agent"] = self.settings.user_agent
        return headers

    def _read_body(self, response: httpx.Response) -> bytes:
        limit = self.settings.max_body_bytes
        body = bytearray()
        for chunk in response.iter_bytes(chunk_size=self.settings.read_buffer_size):
            body.extend(chunk[: limit - len(body)])
            if len(body) >= limit:
                break
        return bytes(body)

    def _release(self, response: httpx.Response | None, client: httpx.Client | None) -> None:
        if response is not None:
            try:
                response.close()
            except Exception as exc:  # noqa: BLE001
                logger.warning("%s", ResourceError(f"Fails to close the input stream from the HTTP response: {exc}"))
        if client is not None:
            try:
                client.close()
            except Exception as exc:  # noqa: BLE001
                logger.warning("%s", ResourceError(f"Fails to disconnect the HTTP client: {exc}"))


__all__ = ["FAILURE_PREFIX", "ProbeExecutor"]
