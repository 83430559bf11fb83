"""Prefix search index over test case names.

Provides PrefixIndex, a trie of lower-cased names supporting insertion,
case-insensitive prefix lookup and full rebuild from an authoritative name
list. Entries are never deleted individually; callers rebuild the index after
removing test cases from the store.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass
class _TrieNode:
    children: dict[str, _TrieNode] = field(default_factory=dict)
    terminal: bool = False


class PrefixIndex:
    """Trie of lower-cased test case names.

    Search results come back in lexicographic (code point ascending) order:
    the walk emits a node's own name before its children and visits child
    keys in ascending order. The walk uses an explicit stack, so very long
    names do not hit the recursion limit.
    """

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._root = _TrieNode()
        self._size = 0
        self._lock = threading.Lock()
        for name in names:
            self.insert(name)

    def insert(self, name: str) -> None:
        """Add a name to the index. Inserting a known name is a no-op.

        Raises:
            TypeError: If name is not a string.
        """
        key = _normalize(name, "name")
        with self._lock:
            self._insert_locked(key)

    def search_prefix(self, prefix: str) -> list[str]:
        """Return all indexed names starting with prefix (case-insensitive).

        Args:
            prefix: Prefix to look up. The empty prefix matches every name.

        Returns:
            Matching lower-cased names in lexicographic order, or an empty
            list when nothing matches.

        Raises:
            TypeError: If prefix is not a string.
        """
        key = _normalize(prefix, "prefix")
        with self._lock:
            node = self._root
            for char in key:
                child = node.children.get(char)
                if child is None:
                    return []
                node = child
            return _collect(node, key)

    def rebuild(self, all_names: Iterable[str]) -> None:
        """Replace the index contents with the given authoritative names.

        Raises:
            TypeError: If any name is not a string. The index is left
                unchanged in that case.
        """
        keys = [_normalize(name, "name") for name in all_names]
        with self._lock:
            self._root = _TrieNode()
            self._size = 0
            for key in keys:
                self._insert_locked(key)

    def __len__(self) -> int:
        return self._size

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        with self._lock:
            node = self._root
            for char in name.lower():
                node = node.children.get(char)
                if node is None:
                    return False
            return node.terminal

    def _insert_locked(self, key: str) -> None:
        node = self._root
        for char in key:
            child = node.children.get(char)
            if child is None:
                child = _TrieNode()
                node.children[char] = child
            node = child
        if not node.terminal:
            node.terminal = True
            self._size += 1


def _normalize(value: str, what: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{what} must be a str, got {type(value).__name__}")
    return value.lower()


def _collect(start: _TrieNode, prefix: str) -> list[str]:
    """Collect all terminal names below start in lexicographic order."""
    results: list[str] = []
    stack: list[tuple[_TrieNode, str]] = [(start, prefix)]
    while stack:
        node, path = stack.pop()
        if node.terminal:
            results.append(path)
        # Push in descending key order so the smallest key is popped first
        for char in sorted(node.children, reverse=True):
            stack.append((node.children[char], path + char))
    return results
