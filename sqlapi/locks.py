"""Per-table mutual exclusion for statement execution."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Optional


class TableLockHandle:
    """A held table lock; releasing it more than once is harmless."""

    def __init__(self, lock: threading.Lock) -> None:
        self._lock: Optional[threading.Lock] = lock

    def release(self) -> None:
        """Release the table lock if this handle still holds it."""
        lock, self._lock = self._lock, None
        if lock is not None:
            lock.release()

    def __enter__(self) -> "TableLockHandle":
        return self

    def __exit__(self, *args) -> None:
        self.release()


class TableLockManager:
    """Hands out one exclusive lock per table key.

    Requests for the same key are serialised; different keys proceed in
    parallel. The registry lock only guards the table of per-key locks.
    """

    def __init__(self) -> None:
        self._registry_lock = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def acquire(self, table_key: str) -> TableLockHandle:
        """Block until the lock for ``table_key`` is held and return its handle."""
        with self._registry_lock:
            lock = self._locks.get(table_key)
            if lock is None:
                lock = threading.Lock()
                self._locks[table_key] = lock
        lock.acquire()
        return TableLockHandle(lock)

    @contextmanager
    def lock(self, table_key: str) -> Iterator[TableLockHandle]:
        """Hold the lock for ``table_key`` for the duration of a with-block."""
        handle = self.acquire(table_key)
        try:
            yield handle
        finally:
            handle.release()