"""Name search: trie-backed prefix index over test case names."""

from qa_dashboard.search.prefix_index import PrefixIndex

__all__ = [
    "PrefixIndex",
]
