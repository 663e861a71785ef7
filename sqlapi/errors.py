"""Error codes reported by the SQL API and classification of engine failures."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes exposed in HTTP/JSON responses."""

    NONE = "NONE"
    INVALID_JSON = "INVALID_JSON"
    MISSING_SQL_FIELD = "MISSING_SQL_FIELD"
    INVALID_CONTENT_TYPE = "INVALID_CONTENT_TYPE"
    CONTENT_LENGTH_REQUIRED = "CONTENT_LENGTH_REQUIRED"
    INVALID_CONTENT_LENGTH = "INVALID_CONTENT_LENGTH"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    HEADER_TOO_LARGE = "HEADER_TOO_LARGE"
    CHUNKED_NOT_SUPPORTED = "CHUNKED_NOT_SUPPORTED"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    NOT_FOUND = "NOT_FOUND"
    SQL_LEX_ERROR = "SQL_LEX_ERROR"
    SQL_PARSE_ERROR = "SQL_PARSE_ERROR"
    UNSUPPORTED_SQL = "UNSUPPORTED_SQL"
    INVALID_SQL_ARGUMENT = "INVALID_SQL_ARGUMENT"
    ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
    SCHEMA_LOAD_ERROR = "SCHEMA_LOAD_ERROR"
    STORAGE_IO_ERROR = "STORAGE_IO_ERROR"
    INDEX_REBUILD_ERROR = "INDEX_REBUILD_ERROR"
    QUEUE_FULL = "QUEUE_FULL"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    def __str__(self) -> str:
        return self.value


class EngineError(Exception):
    """A failure carrying an API error code and a human-readable message."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = ErrorCode(code)
        self.message = message

    def __repr__(self) -> str:
        return f"EngineError({self.code.value!r}, {self.message!r})"


_INVALID_ARGUMENT_MARKERS = (
    "WHERE id value must be an integer",
    "explicit id column is not allowed",
    "unknown column in INSERT",
    "unknown column in SELECT",
    "unknown column in WHERE",
    "column count and value count do not match",
    "duplicate column in INSERT",
    "newline in value is not supported",
)

_EXECUTION_STORAGE_MARKERS = (
    "failed to open table data file",
    "table data file is empty",
    "failed to open table file",
)

_SCHEMA_STORAGE_MARKERS = (
    "failed to open table data file",
    "table data file is empty",
    "failed to open schema meta file",
)


def _mentions_any(message: str, markers) -> bool:
    return any(marker in message for marker in markers)


def classify_schema_load_error(message: str) -> ErrorCode:
    """Separate storage I/O problems from malformed schemas."""
    if _mentions_any(message, _SCHEMA_STORAGE_MARKERS):
        return ErrorCode.STORAGE_IO_ERROR
    return ErrorCode.SCHEMA_LOAD_ERROR


def classify_execution_error(message: str, is_id_lookup: bool) -> ErrorCode:
    """Map an executor failure message to an API error code.

    ``is_id_lookup`` is true when the statement was a SELECT filtered by ``id``,
    whose remaining failures come from the index path.
    """
    if _mentions_any(message, _INVALID_ARGUMENT_MARKERS):
        return ErrorCode.INVALID_SQL_ARGUMENT
    if _mentions_any(message, _EXECUTION_STORAGE_MARKERS):
        return ErrorCode.STORAGE_IO_ERROR
    if is_id_lookup or "forced index registration failure" in message:
        return ErrorCode.INDEX_REBUILD_ERROR
    return ErrorCode.ENGINE_EXECUTION_ERROR