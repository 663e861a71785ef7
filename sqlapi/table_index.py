"""Per-table registry of in-memory id indexes rebuilt from row scans."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from sqlapi.bptree import BPlusTree, DuplicateKeyError

# A scanner yields the file offset of every data row of a table, in order.
Scanner = Callable[[str], Iterable[int]]


class TableIndexError(Exception):
    """Raised when an index cannot be loaded or updated."""


@dataclass(frozen=True)
class LookupResult:
    """Outcome of an id lookup: whether it was found and where the row lives."""

    found: bool
    row_offset: Optional[int] = None


@dataclass(eq=False)
class _TableIndex:
    tree: BPlusTree = field(default_factory=BPlusTree)
    loaded: bool = False
    next_id: int = 1

    def unload(self) -> None:
        self.tree.clear()
        self.loaded = False
        self.next_id = 1


class TableIndexRegistry:
    """Keeps one B+ tree per table, rebuilding it from a row scan on demand.

    Row ids are the 1-based positions of data rows, so a rebuilt index maps
    id ``n`` to the offset of the ``n``-th row the scanner yields.
    """

    def __init__(self, scanner: Scanner) -> None:
        self._scanner = scanner
        self._lock = threading.RLock()
        self._tables: dict[str, _TableIndex] = {}
        self._fail_next_register = False

    def _ensure_loaded(self, table_name: str) -> _TableIndex:
        with self._lock:
            entry = self._tables.setdefault(table_name, _TableIndex())
            if entry.loaded:
                return entry

            entry.unload()
            next_id = 1
            try:
                for row_offset in self._scanner(table_name):
                    entry.tree.insert(next_id, row_offset)
                    next_id += 1
            except DuplicateKeyError as exc:
                entry.unload()
                raise TableIndexError(str(exc)) from exc
            except (OSError, ValueError, TableIndexError) as exc:
                entry.unload()
                if isinstance(exc, TableIndexError):
                    raise
                raise TableIndexError(str(exc)) from exc

            entry.loaded = True
            entry.next_id = next_id
            return entry

    def reset(self) -> None:
        """Forget every table index and clear any pending forced failure."""
        with self._lock:
            for entry in self._tables.values():
                entry.tree.clear()
            self._tables.clear()
            self._fail_next_register = False

    def invalidate(self, table_name: str) -> None:
        """Mark a table's index as needing a rebuild; unknown tables are ignored."""
        with self._lock:
            entry = self._tables.get(table_name)
            if entry is not None:
                entry.unload()

    def is_loaded(self, table_name: str) -> bool:
        """Tell whether the table's index is currently in memory."""
        with self._lock:
            entry = self._tables.get(table_name)
            return entry is not None and entry.loaded

    def next_id(self, table_name: str) -> int:
        """Return the id the next inserted row of the table will receive."""
        return self._ensure_loaded(table_name).next_id

    def register_row(self, table_name: str, row_id: int, row_offset: int) -> None:
        """Record a freshly appended row under ``row_id``."""
        with self._lock:
            if self._fail_next_register:
                self._fail_next_register = False
                raise TableIndexError("forced index registration failure")

            entry = self._ensure_loaded(table_name)
            try:
                entry.tree.insert(row_id, row_offset)
            except DuplicateKeyError as exc:
                raise TableIndexError(str(exc)) from exc

            if row_id >= entry.next_id:
                entry.next_id = row_id + 1

    def find_row(self, table_name: str, row_id: int) -> LookupResult:
        """Look up the row offset for ``row_id``, rebuilding the index if needed."""
        with self._lock:
            entry = self._ensure_loaded(table_name)
            offset = entry.tree.search(row_id)
            if offset is None:
                return LookupResult(found=False)
            return LookupResult(found=True, row_offset=offset)

    def force_next_register_failure(self) -> None:
        """Make the next register_row call fail once."""
        with self._lock:
            self._fail_next_register = True