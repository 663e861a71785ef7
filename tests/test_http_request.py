import socket

import pytest

from sqlapi.errors import EngineError, ErrorCode
from sqlapi.http_request import HttpRequest, HttpRequestError, read_request


def _read(raw: bytes, header_limit: int = 8192, body_limit: int = 4096) -> HttpRequest:
    client, server = socket.socketpair()
    try:
        client.sendall(raw)
        client.shutdown(socket.SHUT_WR)
        return read_request(server, header_limit, body_limit)
    finally:
        client.close()
        server.close()


def _error(raw: bytes, **limits) -> HttpRequestError:
    with pytest.raises(HttpRequestError) as info:
        _read(raw, **limits)
    return info.value


def test_get_request_line_and_headers():
    request = _read(b"GET /health HTTP/1.1\r\nHost: localhost\r\nAccept:  */*  \r\n\r\n")
    assert (request.method, request.path, request.version) == ("GET", "/health", "HTTP/1.1")
    assert request.headers == [("Host", "localhost"), ("Accept", "*/*")]
    assert request.body == b""


def test_post_body_read_exactly():
    payload = b'{"sql":"SELECT * FROM users;"}'
    raw = (
        b"POST /query HTTP/1.1\r\nContent-Type: application/json\r\n"
        b"Content-Length: " + str(len(payload)).encode() + b"\r\n\r\n" + payload + b"extra"
    )
    request = _read(raw)
    assert request.body == payload
    assert request.body_text == payload.decode()


def test_header_lookup_ignores_case_and_returns_first():
    request = _read(b"GET / HTTP/1.1\r\nX-Tag: one\r\nx-tag: two\r\n\r\n")
    assert request.header("X-TAG") == "one"
    assert request.header("missing") is None


def test_error_is_engine_error():
    err = _error(b"GET / HTTP/1.0\r\n\r\n")
    assert isinstance(err, EngineError)
    assert err.code is ErrorCode.INVALID_CONTENT_LENGTH
    assert err.message == "only HTTP/1.1 is supported"


@pytest.mark.parametrize(
    "line",
    [b"GET /\r\n\r\n", b"GET / HTTP/1.1 extra\r\n\r\n", b"\r\n\r\n"],
)
def test_invalid_request_line(line):
    err = _error(line)
    assert err.message == "invalid HTTP request line"


def test_truncated_request():
    err = _error(b"GET / HTTP/1.1\r\nHost: x\r\n")
    assert err.code is ErrorCode.INVALID_CONTENT_LENGTH
    assert err.message == "truncated HTTP request"


def test_header_too_large():
    err = _error(b"GET / HTTP/1.1\r\nHost: localhost\r\n\r\n", header_limit=10)
    assert err.code is ErrorCode.HEADER_TOO_LARGE


def test_header_exactly_at_limit_is_accepted():
    raw = b"GET / HTTP/1.1\r\n\r\n"
    request = _read(raw, header_limit=len(raw))
    assert request.path == "/"


def test_folded_header_rejected():
    err = _error(b"GET / HTTP/1.1\r\nA: b\r\n continued\r\n\r\n")
    assert err.message == "folded HTTP headers are not supported"


def test_header_without_colon_rejected():
    err = _error(b"GET / HTTP/1.1\r\nBroken header\r\n\r\n")
    assert err.message == "malformed HTTP header line"


def test_chunked_rejected():
    err = _error(b"POST /query HTTP/1.1\r\nTransfer-Encoding: gzip, Chunked\r\n\r\n")
    assert err.code is ErrorCode.CHUNKED_NOT_SUPPORTED
    assert err.message == "Transfer-Encoding: chunked is not supported"


def test_other_transfer_encoding_allowed():
    request = _read(b"GET / HTTP/1.1\r\nTransfer-Encoding: gzip\r\n\r\n")
    assert request.header("transfer-encoding") == "gzip"


@pytest.mark.parametrize("value", [b"-1", b"abc", b"1.5", b""])
def test_invalid_content_length(value):
    err = _error(b"POST /query HTTP/1.1\r\nContent-Length: " + value + b"\r\n\r\n")
    assert err.code is ErrorCode.INVALID_CONTENT_LENGTH
    assert err.message == "Content-Length must be a non-negative integer"


def test_body_too_large():
    err = _error(
        b"POST /query HTTP/1.1\r\nContent-Length: 10\r\n\r\n0123456789",
        body_limit=5,
    )
    assert err.code is ErrorCode.PAYLOAD_TOO_LARGE


def test_body_shorter_than_content_length():
    err = _error(b"POST /query HTTP/1.1\r\nContent-Length: 10\r\n\r\nabc")
    assert err.code is ErrorCode.INVALID_CONTENT_LENGTH
    assert err.message == "request body is shorter than Content-Length"


def test_zero_content_length_gives_empty_body():
    request = _read(b"POST /query HTTP/1.1\r\nContent-Length: 0\r\n\r\n")
    assert request.body == b""