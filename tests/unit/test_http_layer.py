# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import base64
import logging

import httpx
import pytest

from httpprobe.config import ProbeSettings
from httpprobe.errors import ErrorCategory, NetworkError, ValidationError
from httpprobe.http.executor import FAILURE_PREFIX, ProbeExecutor
from httpprobe.http.headers import parse_header_block, render_response_headers
from httpprobe.http.url import normalize_probe_url, parse_probe_url
from httpprobe.models.spec import ProbeSpec


class SequenceTraffic:
    def __init__(self, readings):
        self._readings = list(readings)
        self.calls = 0

    def rx_tx_bytes(self) -> int:
        self.calls += 1
        return self._readings[min(self.calls - 1, len(self._readings) - 1)]


class CountingStream(httpx.SyncByteStream):
    def __init__(self, chunks, fail_on_close=False):
        self._chunks = list(chunks)
        self.fail_on_close = fail_on_close
        self.closed = 0

    def __iter__(self):
        yield from self._chunks

    def close(self) -> None:
        self.closed += 1
        if self.fail_on_close:
            raise OSError("stream already reset")


class CountingTransport(httpx.MockTransport):
    def __init__(self, handler):
        super().__init__(handler)
        self.requests = []
        self.closed = 0

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return super().handle_request(request)

    def close(self) -> None:
        self.closed += 1


def _executor(handler, settings=None, traffic=None):
    transport = CountingTransport(handler)
    executor = ProbeExecutor(settings or ProbeSettings(), transport=transport, traffic=traffic or SequenceTraffic([0]))
    return executor, transport


def test_parse_header_block_accepts_key_value_lines():
    assert parse_header_block("Accept: text/html\nX-Test:1") == [("Accept", "text/html"), ("X-Test", "1")]
    assert parse_header_block("A:1\r\nB:2\r\n") == [("A", "1"), ("B", "2")]
    assert parse_header_block(None) == []
    assert parse_header_block("   \n ") == []


@pytest.mark.parametrize("line", ["badheaderline", "Host:example.com:8080", "X-Empty:", "A::", ":", "Nom\u00e9:1"])
def test_parse_header_block_rejects_lines_without_two_pieces(line):
    with pytest.raises(ValidationError) as excinfo:
        parse_header_block(f"Accept: */*\n{line}")
    assert f"Invalid header line: {line}" in str(excinfo.value)


def test_parse_header_block_drops_trailing_empty_pieces():
    assert parse_header_block("X-A:1:") == [("X-A", "1")]
    assert parse_header_block("X-A:1::") == [("X-A", "1")]
    assert parse_header_block(":value") == [("", "value")]


def test_render_response_headers_groups_repeated_names_in_order():
    rendered = render_response_headers([("Server", "nginx"), ("Set-Cookie", "a=1"), ("Set-Cookie", "b=2")])
    assert rendered == "Server:nginx\nSet-Cookie:a=1, b=2\n"
    assert render_response_headers([]) == ""


def test_normalize_probe_url_prefixes_missing_scheme():
    assert normalize_probe_url("example.com") == "http://example.com"
    assert normalize_probe_url("https://example.com/a") == "https://example.com/a"
    assert normalize_probe_url("http://example.com") == "http://example.com"


def test_parse_probe_url_rejects_missing_host():
    with pytest.raises(NetworkError) as excinfo:
        parse_probe_url("http://")
    assert excinfo.value.category == ErrorCategory.INVALID_URL
    assert parse_probe_url("http://example.com/x").host == "example.com"


def test_execute_captures_status_headers_and_body():
    executor, transport = _executor(lambda request: httpx.Response(200, content=b"hello"))
    outcome = executor.execute(ProbeSpec.from_params({"url": "example.com"}))

    assert outcome.status_code == 200
    assert outcome.body == b"hello"
    assert outcome.body_len == 5
    assert outcome.content_length == 5
    assert "content-length:5\n" in outcome.headers.lower()
    assert outcome.headers_len == len(outcome.headers)
    assert outcome.elapsed_ms >= 0
    values = outcome.to_values()
    assert values["body"] == "aGVsbG8="
    assert base64.b64decode(values["body"]) == b"hello"
    assert transport.requests[0].url.scheme == "http"
    assert transport.requests[0].url.host == "example.com"
    assert transport.requests[0].method == "GET"


def test_execute_sends_parsed_request_headers_and_default_user_agent():
    executor, transport = _executor(
        lambda request: httpx.Response(204),
        settings=ProbeSettings(user_agent="Probe/1.0"),
    )
    spec = ProbeSpec.from_params({"url": "http://example.com", "headers": "Accept: text/html\nX-Test:1"})
    outcome = executor.execute(spec)

    sent = transport.requests[0].headers
    assert outcome.status_code == 204
    assert sent["Accept"] == "text/html"
    assert sent["X-Test"] == "1"
    assert sent["User-Agent"] == "Probe/1.0"
    assert "body" not in outcome.to_values()


def test_execute_keeps_user_agent_from_header_block():
    executor, transport = _executor(lambda request: httpx.Response(200))
    executor.execute(ProbeSpec.from_params({"url": "example.com", "headers": "User-Agent: Custom"}))
    assert transport.requests[0].headers["User-Agent"] == "Custom"


def test_execute_passes_method_through():
    executor, transport = _executor(lambda request: httpx.Response(200))
    executor.execute(ProbeSpec.from_params({"url": "example.com", "method": "head"}))
    assert transport.requests[0].method == "HEAD"


def test_execute_treats_error_status_as_outcome():
    executor, _ = _executor(lambda request: httpx.Response(404, content=b"missing"))
    outcome = executor.execute(ProbeSpec.from_params({"url": "example.com/nope"}))
    assert outcome.status_code == 404
    assert outcome.body == b"missing"


def test_execute_caps_body_at_one_mebibyte():
    payload = b"x" * (2 * 1024 * 1024)
    executor, _ = _executor(lambda request: httpx.Response(200, content=payload))
    outcome = executor.execute(ProbeSpec.from_params({"url": "example.com"}))
    assert outcome.body_len == 1048576
    assert outcome.content_length == len(payload)


def test_execute_caps_body_with_small_limit_across_chunks():
    stream = CountingStream([b"abcd", b"efgh", b"ijkl"])
    executor, _ = _executor(
        lambda request: httpx.Response(200, stream=stream),
        settings=ProbeSettings(max_body_bytes=6, read_buffer_size=4),
    )
    outcome = executor.execute(ProbeSpec.from_params({"url": "example.com"}))
    assert outcome.body == b"abcdef"
    assert outcome.content_length == -1
    assert stream.closed == 1


def test_execute_releases_stream_and_client_once_on_success():
    stream = CountingStream([b"hello"])
    executor, transport = _executor(lambda request: httpx.Response(200, stream=stream))
    executor.execute(ProbeSpec.from_params({"url": "example.com"}))
    assert stream.closed == 1
    assert transport.closed == 1


def test_execute_sends_non_ascii_header_values():
    executor, transport = _executor(lambda request: httpx.Response(200))
    executor.execute(ProbeSpec.from_params({"url": "example.com", "headers": "X-Name: café\nX-City: 東京"}))

    raw = dict(transport.requests[0].headers.raw)
    assert raw[b"X-Name"] == "café".encode("latin-1")
    assert raw[b"X-City"] == "東京".encode("utf-8")


def test_execute_rejects_header_line_with_empty_value():
    executor, transport = _executor(lambda request: httpx.Response(200))
    with pytest.raises(ValidationError, match="Invalid header line: X-Empty:"):
        executor.execute(ProbeSpec.from_params({"url": "example.com", "headers": "X-Empty:"}))
    assert transport.requests == []
    assert transport.closed == 1


class BrokenStream(CountingStream):
    def __iter__(self):
        yield b"abc"
        raise OSError("connection reset by peer")


def test_execute_releases_stream_and_client_once_on_mid_body_failure():
    stream = BrokenStream([])
    traffic = SequenceTraffic([0, 500])
    executor, transport = _executor(lambda request: httpx.Response(200, stream=stream), traffic=traffic)

    with pytest.raises(NetworkError) as excinfo:
        executor.execute(ProbeSpec.from_params({"url": "example.com"}))

    assert str(excinfo.value).startswith(FAILURE_PREFIX)
    assert "connection reset by peer" in str(excinfo.value)
    assert stream.closed == 1
    assert transport.closed == 1
    assert traffic.calls == 1


def test_execute_invalid_header_line_fails_and_releases_client():
    executor, transport = _executor(lambda request: httpx.Response(200))
    spec = ProbeSpec.from_params({"url": "example.com", "headers": "badheaderline"})

    with pytest.raises(ValidationError) as excinfo:
        executor.execute(spec)

    assert "Invalid header line: badheaderline" in str(excinfo.value)
    assert transport.requests == []
    assert transport.closed == 1


def test_execute_connect_failure_raises_aggregated_network_error():
    def refuse(request):
        raise httpx.ConnectError("Connection refused", request=request)

    traffic = SequenceTraffic([10, 99])
    executor, transport = _executor(refuse, traffic=traffic)

    with pytest.raises(NetworkError) as excinfo:
        executor.execute(ProbeSpec.from_params({"url": "example.com"}))

    assert str(excinfo.value).startswith(FAILURE_PREFIX)
    assert "Connection refused" in str(excinfo.value)
    assert excinfo.value.category == ErrorCategory.CONNECTION_ERROR
    assert transport.closed == 1
    assert traffic.calls == 1


def test_execute_timeout_is_categorized():
    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    executor, _ = _executor(slow)
    with pytest.raises(NetworkError) as excinfo:
        executor.execute(ProbeSpec.from_params({"url": "example.com"}))
    assert excinfo.value.category == ErrorCategory.TIMEOUT


def test_execute_malformed_url_never_opens_client():
    executor, transport = _executor(lambda request: httpx.Response(200))
    with pytest.raises(NetworkError) as excinfo:
        executor.execute(ProbeSpec(url="http://"))
    assert str(excinfo.value).startswith(FAILURE_PREFIX)
    assert excinfo.value.category == ErrorCategory.INVALID_URL
    assert transport.closed == 0


def test_execute_logs_close_failure_without_changing_outcome(caplog):
    stream = CountingStream([b"abcdef", b"ghijkl"], fail_on_close=True)
    executor, transport = _executor(
        lambda request: httpx.Response(200, stream=stream),
        settings=ProbeSettings(max_body_bytes=4, read_buffer_size=4),
    )
    with caplog.at_level(logging.WARNING, logger="httpprobe.http.executor"):
        outcome = executor.execute(ProbeSpec.from_params({"url": "example.com"}))

    assert outcome.body == b"abcd"
    assert stream.closed == 1
    assert transport.closed == 1
    assert "Fails to close the input stream" in caplog.text


def test_execute_accounts_device_traffic_delta():
    executor, _ = _executor(lambda request: httpx.Response(200), traffic=SequenceTraffic([100, 350]))
    assert executor.execute(ProbeSpec.from_params({"url": "example.com"})).data_consumed_delta == 250

    executor, _ = _executor(lambda request: httpx.Response(200), traffic=SequenceTraffic([500, 100]))
    assert executor.execute(ProbeSpec.from_params({"url": "example.com"})).data_consumed_delta == 0
