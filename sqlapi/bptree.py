"""In-memory B+ tree mapping integer keys to row offsets."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from dataclasses import dataclass, field
from typing import Optional

# A node holds at most this many keys once an insert has finished.
_MAX_KEYS = 3


class DuplicateKeyError(ValueError):
    """Raised when a key that is already present is inserted again."""


@dataclass(eq=False)
class _Node:
    is_leaf: bool
    keys: list = field(default_factory=list)
    values: list = field(default_factory=list)
    children: list = field(default_factory=list)
    next: Optional["_Node"] = None


_Split = Optional[tuple]


def _insert_into_leaf(node: _Node, key: int, value) -> _Split:
    position = bisect_left(node.keys, key)
    if position < len(node.keys) and node.keys[position] == key:
        raise DuplicateKeyError("duplicate id key")

    node.keys.insert(position, key)
    node.values.insert(position, value)
    if len(node.keys) <= _MAX_KEYS:
        return None

    split_index = len(node.keys) // 2
    right = _Node(
        is_leaf=True,
        keys=node.keys[split_index:],
        values=node.values[split_index:],
        next=node.next,
    )
    del node.keys[split_index:]
    del node.values[split_index:]
    node.next = right
    return right.keys[0], right


def _insert_into_internal(node: _Node, key: int, value) -> _Split:
    child_index = bisect_right(node.keys, key)
    split = _insert_into_node(node.children[child_index], key, value)
    if split is None:
        return None

    promoted_key, right_child = split
    node.keys.insert(child_index, promoted_key)
    node.children.insert(child_index + 1, right_child)
    if len(node.keys) <= _MAX_KEYS:
        return None

    # The middle key moves up to the parent and stays in neither half.
    mid_index = len(node.keys) // 2
    promoted = node.keys[mid_index]
    right = _Node(
        is_leaf=False,
        keys=node.keys[mid_index + 1:],
        children=node.children[mid_index + 1:],
    )
    del node.keys[mid_index:]
    del node.children[mid_index + 1:]
    return promoted, right


def _insert_into_node(node: _Node, key: int, value) -> _Split:
    if node.is_leaf:
        return _insert_into_leaf(node, key, value)
    return _insert_into_internal(node, key, value)


class BPlusTree:
    """A small-order B+ tree whose leaves map unique keys to values."""

    def __init__(self) -> None:
        self._root: Optional[_Node] = None

    def clear(self) -> None:
        """Drop every entry, leaving an empty tree."""
        self._root = None

    def insert(self, key: int, value) -> None:
        """Store ``value`` under ``key``; raise DuplicateKeyError if the key exists."""
        if self._root is None:
            self._root = _Node(is_leaf=True, keys=[key], values=[value])
            return

        split = _insert_into_node(self._root, key, value)
        if split is None:
            return

        promoted_key, right = split
        self._root = _Node(
            is_leaf=False,
            keys=[promoted_key],
            children=[self._root, right],
        )

    def _find_leaf(self, key: int) -> Optional[_Node]:
        node = self._root
        while node is not None and not node.is_leaf:
            node = node.children[bisect_right(node.keys, key)]
        return node

    def search(self, key: int):
        """Return the value stored under ``key``, or None if it is absent."""
        leaf = self._find_leaf(key)
        if leaf is None:
            return None
        position = bisect_left(leaf.keys, key)
        if position < len(leaf.keys) and leaf.keys[position] == key:
            return leaf.values[position]
        return None

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, int):
            return False
        leaf = self._find_leaf(key)
        if leaf is None:
            return False
        position = bisect_left(leaf.keys, key)
        return position < len(leaf.keys) and leaf.keys[position] == key