"""
Trie module for SyncGraph.

This module provides the prefix index that backs autocomplete.
"""

from .prefix_index import PrefixIndex, TrieNode

__all__ = ["PrefixIndex", "TrieNode"]
