"""
Character trie used for autocomplete over the catalog.

Texts are normalized (stripped, lowercased) before they are indexed or
queried, so lookups are case-insensitive prefix matches. Each node keeps a
count of the live items stored at or below it; when a removal drops a
branch's count to zero the branch is pruned instead of being left behind.
"""

from __future__ import annotations
import threading
from typing import Any, Dict, Hashable, Iterable, List, Optional, Tuple
from loguru import logger


class TrieNode:
    """A single trie node."""

    __slots__ = ("children", "items", "end_of_word", "live")

    def __init__(self):
        self.children: Dict[str, TrieNode] = {}
        # Ordered set: dict keys keep insertion order
        self.items: Dict[Hashable, None] = {}
        self.end_of_word = False
        self.live = 0

    def child(self, char: str) -> Optional["TrieNode"]:
        return self.children.get(char)


def _normalize(text: Optional[str]) -> str:
    if text is None:
        return ""
    return text.strip().lower()


class PrefixIndex:
    """
    Prefix index mapping normalized texts to sets of items.

    A single item may be indexed under several texts (e.g. a track's title and
    its artist); each text gets its own insertion path. Items are deduplicated
    by their own equality/hash, so tracks collapse by ``track_id``.
    """

    def __init__(self):
        self._root = TrieNode()
        self._lock = threading.RLock()
        self._pairs = 0

    def insert(self, text: Optional[str], item: Any) -> None:
        """Index ``item`` under ``text``. Blank text is ignored."""
        key = _normalize(text)
        if not key or item is None:
            return

        with self._lock:
            node = self._root
            path = [node]
            for char in key:
                nxt = node.child(char)
                if nxt is None:
                    nxt = TrieNode()
                    node.children[char] = nxt
                node = nxt
                path.append(node)

            node.end_of_word = True
            if item in node.items:
                return
            node.items[item] = None
            for visited in path:
                visited.live += 1
            self._pairs += 1

        logger.debug(f"Indexed '{key}'")

    def remove(self, text: Optional[str], item: Any) -> bool:
        """
        Remove ``item`` from the entry for ``text``.

        Returns:
            True if the item was indexed under that text, False otherwise
        """
        key = _normalize(text)
        if not key or item is None:
            return False

        with self._lock:
            node = self._root
            path: List[Tuple[TrieNode, str, TrieNode]] = []
            for char in key:
                nxt = node.child(char)
                if nxt is None:
                    return False
                path.append((node, char, nxt))
                node = nxt

            if item not in node.items:
                return False

            del node.items[item]
            if not node.items:
                node.end_of_word = False

            self._root.live -= 1
            for parent, char, child in path:
                child.live -= 1
            # Prune the highest branch that no longer holds any item
            for parent, char, child in path:
                if child.live == 0:
                    del parent.children[char]
                    break
            self._pairs -= 1

        logger.debug(f"Removed item from '{key}'")
        return True

    def query(self, prefix: Optional[str]) -> List[Any]:
        """
        Return every item indexed under a text starting with ``prefix``.

        Complexity: O(len(prefix) + size of the matching subtree)
        """
        key = _normalize(prefix)
        if not key:
            return []

        with self._lock:
            node = self._root
            for char in key:
                node = node.child(char)
                if node is None:
                    return []

            found: Dict[Hashable, None] = {}
            stack = [node]
            while stack:
                current = stack.pop()
                if current.end_of_word:
                    for item in current.items:
                        found.setdefault(item, None)
                stack.extend(current.children.values())

        return list(found)

    def clear(self) -> None:
        with self._lock:
            self._root = TrieNode()
            self._pairs = 0

    def rebuild(self, entries: Iterable[Tuple[Optional[str], Any]]) -> int:
        """
        Replace the whole index with ``(text, item)`` entries.

        The new trie is populated off to the side and swapped in at once, so
        concurrent queries see either the old or the new contents.
        """
        staging = PrefixIndex()
        for text, item in entries:
            staging.insert(text, item)

        with self._lock:
            self._root = staging._root
            self._pairs = staging._pairs

        logger.info(f"Prefix index rebuilt with {self._pairs} entries")
        return self._pairs

    def is_empty(self) -> bool:
        with self._lock:
            return not self._root.children

    def node_count(self) -> int:
        """Number of nodes below the root."""
        with self._lock:
            count = 0
            stack = list(self._root.children.values())
            while stack:
                node = stack.pop()
                count += 1
                stack.extend(node.children.values())
            return count

    def __len__(self) -> int:
        return self._pairs
