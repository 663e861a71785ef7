"""HTTP/1.1 responses and the mapping of API error codes to status codes."""

from __future__ import annotations

import json
import socket
from dataclasses import dataclass

from sqlapi.errors import ErrorCode

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
HTML_CONTENT_TYPE = "text/html; charset=utf-8"

_ERROR_BODY_LIMIT = 1024
_HEADER_LIMIT = 256

_REASON_PHRASES = {
    200: "OK",
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    411: "Length Required",
    413: "Payload Too Large",
    431: "Request Header Fields Too Large",
    500: "Internal Server Error",
    501: "Not Implemented",
    503: "Service Unavailable",
}

_STATUS_BY_CODE = {
    ErrorCode.INVALID_JSON: 400,
    ErrorCode.MISSING_SQL_FIELD: 400,
    ErrorCode.INVALID_CONTENT_TYPE: 400,
    ErrorCode.INVALID_CONTENT_LENGTH: 400,
    ErrorCode.SQL_LEX_ERROR: 400,
    ErrorCode.SQL_PARSE_ERROR: 400,
    ErrorCode.UNSUPPORTED_SQL: 400,
    ErrorCode.INVALID_SQL_ARGUMENT: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.METHOD_NOT_ALLOWED: 405,
    ErrorCode.CONTENT_LENGTH_REQUIRED: 411,
    ErrorCode.PAYLOAD_TOO_LARGE: 413,
    ErrorCode.HEADER_TOO_LARGE: 431,
    ErrorCode.CHUNKED_NOT_SUPPORTED: 501,
    ErrorCode.QUEUE_FULL: 503,
}

_JSON_ESCAPES = str.maketrans({
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
})


def http_status(code: ErrorCode) -> int:
    """Map an API error code to the HTTP status code it is reported with."""
    return _STATUS_BY_CODE.get(ErrorCode(code), 500)


def reason_phrase(status_code: int) -> str:
    """Return the reason phrase for a status code."""
    return _REASON_PHRASES.get(status_code, "Internal Server Error")


def json_escape(value: str) -> str:
    """Escape backslashes, quotes, newlines, carriage returns and tabs for JSON."""
    return value.translate(_JSON_ESCAPES)


@dataclass
class HttpResponse:
    """A complete response: status, content type and text body."""

    status_code: int
    content_type: str = JSON_CONTENT_TYPE
    body: str = ""

    @classmethod
    def json(cls, status_code: int, body: str) -> "HttpResponse":
        """Build a response carrying a JSON body."""
        return cls(status_code, JSON_CONTENT_TYPE, body)

    @classmethod
    def html(cls, status_code: int, body: str) -> "HttpResponse":
        """Build a response carrying an HTML body."""
        return cls(status_code, HTML_CONTENT_TYPE, body)

    @classmethod
    def error(cls, code: ErrorCode, message: str) -> "HttpResponse":
        """Wrap an error in the API's JSON error envelope."""
        code = ErrorCode(code)
        body = (
            '{"ok":false,"error":{"code":"%s","message":"%s"}}'
            % (code.value, json_escape(message))
        )
        if len(body.encode("utf-8")) >= _ERROR_BODY_LIMIT:
            raise ValueError("error response body exceeds size limit")
        return cls.json(http_status(code), body)

    @property
    def body_bytes(self) -> bytes:
        return self.body.encode("utf-8")

    def to_bytes(self) -> bytes:
        """Serialise the response as HTTP/1.1 wire bytes with Connection: close."""
        payload = self.body_bytes
        header = (
            f"HTTP/1.1 {self.status_code} {reason_phrase(self.status_code)}\r\n"
            f"Content-Type: {self.content_type or JSON_CONTENT_TYPE}\r\n"
            f"Content-Length: {len(payload)}\r\n"
            "Connection: close\r\n"
            "\r\n"
        ).encode("utf-8")
        if len(header) >= _HEADER_LIMIT:
            raise ValueError("response header exceeds size limit")
        return header + payload

    def send(self, sock: socket.socket) -> None:
        """Write the whole response to ``sock``; socket errors propagate."""
        sock.sendall(self.to_bytes())