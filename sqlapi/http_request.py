"""Reading a single HTTP/1.1 request from a connected socket."""

from __future__ import annotations

import re
import socket
from dataclasses import dataclass, field
from typing import Optional

from sqlapi.errors import EngineError, ErrorCode

_TERMINATOR = b"\r\n\r\n"
_METHOD_LIMIT = 15
_PATH_LIMIT = 127
_VERSION_LIMIT = 15
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1


class HttpRequestError(EngineError):
    """Raised when a request cannot be read or is malformed."""


@dataclass
class HttpRequest:
    """A parsed request: request line, headers in arrival order, and body."""

    method: str
    path: str
    version: str
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes = b""

    def header(self, name: str) -> Optional[str]:
        """Return the first header value whose name matches, ignoring case."""
        wanted = name.lower()
        for header_name, value in self.headers:
            if header_name.lower() == wanted:
                return value
        return None

    @property
    def body_text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


def _fail(code: ErrorCode, message: str) -> HttpRequestError:
    return HttpRequestError(code, message)


def _read_header_block(sock: socket.socket, header_limit: int) -> bytes:
    buffer = bytearray()
    while len(buffer) < header_limit:
        byte = sock.recv(1)
        if not byte:
            raise _fail(ErrorCode.INVALID_CONTENT_LENGTH, "truncated HTTP request")
        buffer += byte
        if buffer.endswith(_TERMINATOR):
            return bytes(buffer)
    raise _fail(ErrorCode.HEADER_TOO_LARGE, "HTTP headers exceed configured size limit")


def _recv_exact(sock: socket.socket, length: int) -> Optional[bytes]:
    chunks = bytearray()
    while len(chunks) < length:
        chunk = sock.recv(length - len(chunks))
        if not chunk:
            return None
        chunks += chunk
    return bytes(chunks)


def _parse_request_line(line: str) -> tuple[str, str, str]:
    parts = line.split()
    if (
        len(parts) != 3
        or len(parts[0]) > _METHOD_LIMIT
        or len(parts[1]) > _PATH_LIMIT
        or len(parts[2]) > _VERSION_LIMIT
    ):
        raise _fail(ErrorCode.INVALID_CONTENT_LENGTH, "invalid HTTP request line")
    method, path, version = parts
    if version != "HTTP/1.1":
        raise _fail(ErrorCode.INVALID_CONTENT_LENGTH, "only HTTP/1.1 is supported")
    return method, path, version


def _parse_headers(lines: list[str]) -> list[tuple[str, str]]:
    headers: list[tuple[str, str]] = []
    for line in lines:
        if line == "":
            break
        if line[0] in " \t":
            raise _fail(
                ErrorCode.INVALID_CONTENT_LENGTH,
                "folded HTTP headers are not supported",
            )
        name, separator, value = line.partition(":")
        if not separator:
            raise _fail(ErrorCode.INVALID_CONTENT_LENGTH, "malformed HTTP header line")
        headers.append((name.strip(), value.strip()))
    return headers


def _parse_content_length(text: str) -> int:
    if _INT_PATTERN.fullmatch(text):
        value = int(text)
        if _INT_MIN <= value <= _INT_MAX and value >= 0:
            return value
    raise _fail(
        ErrorCode.INVALID_CONTENT_LENGTH,
        "Content-Length must be a non-negative integer",
    )


def read_request(sock: socket.socket, header_limit: int, body_limit: int) -> HttpRequest:
    """Read one request from ``sock``.

    Headers must end within ``header_limit`` bytes and a body may be at most
    ``body_limit`` bytes; chunked transfer encoding is rejected.
    """
    block = _read_header_block(sock, header_limit).decode("latin-1")
    lines = block.split("\r\n")
    method, path, version = _parse_request_line(lines[0])
    request = HttpRequest(method, path, version, _parse_headers(lines[1:]))

    transfer_encoding = request.header("Transfer-Encoding")
    if transfer_encoding is not None:
        for token in transfer_encoding.split(","):
            if token.strip().lower() == "chunked":
                raise _fail(
                    ErrorCode.CHUNKED_NOT_SUPPORTED,
                    "Transfer-Encoding: chunked is not supported",
                )

    content_length_header = request.header("Content-Length")
    content_length = (
        _parse_content_length(content_length_header)
        if content_length_header is not None
        else 0
    )

    if content_length > 0:
        if content_length > body_limit:
            raise _fail(
                ErrorCode.PAYLOAD_TOO_LARGE,
                "request body exceeds configured size limit",
            )
        body = _recv_exact(sock, content_length)
        if body is None:
            raise _fail(
                ErrorCode.INVALID_CONTENT_LENGTH,
                "request body is shorter than Content-Length",
            )
        request.body = body

    return request