# sqlapi

Building blocks for a small SQL-over-HTTP database server, in pure Python with
no third-party dependencies. Rows are found by a hidden, auto-incrementing
integer id held in an in-memory B+ tree index; requests are serialised per
table; failures carry error codes that map onto HTTP status codes.

## Modules

- `sqlapi.bptree`: `BPlusTree`, an in-memory B+ tree mapping integer keys to
  values. `insert` raises `DuplicateKeyError` for a key already present,
  `search` returns the value or `None`, `key in tree` tests membership and
  `clear` empties the tree.
- `sqlapi.locks`: `TableLockManager` hands out one lock per table key.
  `acquire(key)` blocks and returns a `TableLockHandle` (release it with
  `release()` or use it in a `with` block; releasing twice is harmless);
  `lock(key)` is a context manager. Requests on the same key run one at a time,
  different keys run in parallel.
- `sqlapi.errors`: `ErrorCode`, the error codes exposed by the API;
  `EngineError`, an exception carrying a `code` and a `message`; and
  `classify_schema_load_error` / `classify_execution_error`, which sort engine
  failure messages into error codes.
- `sqlapi.table_index`: `TableIndexRegistry` keeps one B+ tree per table. It is
  built with a *scanner*, a callable that takes a table name and yields the
  offset of each data row in order. The first time a table's index is needed it
  is rebuilt from the scan, giving row `n` the id `n`. Failures raise
  `TableIndexError`; lookups return a `LookupResult`.
- `sqlapi.http_response`: `HttpResponse` (with `json`, `html` and `error`
  constructors, `to_bytes` and `send`), `http_status` mapping an `ErrorCode` to a
  status code, `reason_phrase`, and `json_escape`.
- `sqlapi.http_request`: `read_request(sock, header_limit, body_limit)` reads
  one HTTP/1.1 request from a socket and returns an `HttpRequest`; problems
  raise `HttpRequestError`, an `EngineError` with the matching `ErrorCode`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

### B+ tree

```python
from sqlapi.bptree import BPlusTree, DuplicateKeyError

tree = BPlusTree()
for key in range(1, 11):
    tree.insert(key, key * 100)

assert tree.search(5) == 500
assert tree.search(42) is None
assert 7 in tree

try:
    tree.insert(5, 999)
except DuplicateKeyError:
    pass
```

### Per-table locks

```python
from sqlapi.locks import TableLockManager

locks = TableLockManager()
with locks.lock("users"):
    ...  # only one holder of "users" at a time
```

### Table index registry

```python
from sqlapi.table_index import LookupResult, TableIndexRegistry

offsets = {"users": [9, 17]}
registry = TableIndexRegistry(lambda table: offsets[table])

assert registry.next_id("users") == 3
assert registry.find_row("users", 2) == LookupResult(found=True, row_offset=17)

registry.register_row("users", 3, 25)
assert registry.next_id("users") == 4

registry.invalidate("users")
assert not registry.is_loaded("users")
```

`force_next_register_failure()` makes the next `register_row` call raise
`TableIndexError("forced index registration failure")` once; `reset()` forgets
every table.

### Error classification

```python
from sqlapi.errors import ErrorCode, classify_execution_error, classify_schema_load_error

assert classify_execution_error("unknown column in WHERE: x", False) is ErrorCode.INVALID_SQL_ARGUMENT
assert classify_execution_error("something broke", True) is ErrorCode.INDEX_REBUILD_ERROR
assert classify_schema_load_error("failed to open schema meta file 'x'") is ErrorCode.STORAGE_IO_ERROR
```

### HTTP responses

```python
from sqlapi.errors import ErrorCode
from sqlapi.http_response import HttpResponse, http_status

assert http_status(ErrorCode.QUEUE_FULL) == 503

response = HttpResponse.error(ErrorCode.NOT_FOUND, "requested path does not exist")
payload = response.to_bytes()  # HTTP/1.1 404 Not Found ... Connection: close
```

`HttpResponse.error` raises `ValueError` if the JSON error body reaches 1024
bytes, and `to_bytes` raises `ValueError` if the header block reaches 256 bytes.

### Reading a request

```python
from sqlapi.http_request import HttpRequestError, read_request

try:
    request = read_request(conn, header_limit=8192, body_limit=65536)
    content_type = request.header("Content-Type")
    sql_text = request.body_text
except HttpRequestError as exc:
    ...  # exc.code is the ErrorCode the response should report
```

Only HTTP/1.1 is accepted; folded headers and `Transfer-Encoding: chunked` are
rejected, and the body is read to exactly `Content-Length` bytes.

## What this package does not do

It has no SQL lexer, parser or executor, no CSV or schema storage, no request
router or handlers, and no server loop or command-line program. The row
offsets the index stores come from whatever scanner the caller supplies, and
sockets are opened and accepted by the caller.