"""Per-account favorites lists."""

from __future__ import annotations
import threading
from typing import Any, Dict, List
from loguru import logger


class FavoritesStore:
    """
    Ordered, duplicate-free list of liked tracks per account.

    Accounts are keyed by handle. An account with no favorites has no entry.
    """

    def __init__(self):
        self._favorites: Dict[str, List[Any]] = {}
        self._lock = threading.RLock()

    def add(self, account_id: str, item: Any) -> bool:
        """Append an item unless already present. Returns whether it was added."""
        if not account_id or item is None:
            return False
        with self._lock:
            items = self._favorites.setdefault(account_id, [])
            if item in items:
                return False
            items.append(item)
        logger.debug(f"Favorite added for '{account_id}'")
        return True

    def remove(self, account_id: str, item: Any) -> bool:
        if not account_id or item is None:
            return False
        with self._lock:
            items = self._favorites.get(account_id)
            if not items or item not in items:
                return False
            items.remove(item)
            if not items:
                del self._favorites[account_id]
        logger.debug(f"Favorite removed for '{account_id}'")
        return True

    def list(self, account_id: str) -> List[Any]:
        with self._lock:
            return list(self._favorites.get(account_id, ()))

    def contains(self, account_id: str, item: Any) -> bool:
        with self._lock:
            return item in self._favorites.get(account_id, ())

    def count(self, account_id: str) -> int:
        with self._lock:
            return len(self._favorites.get(account_id, ()))

    def replace_everywhere(self, item: Any) -> int:
        """Swap in a newer version of an item (same key, newer fields) wherever it is listed."""
        if item is None:
            return 0
        replaced = 0
        with self._lock:
            for items in self._favorites.values():
                for i, current in enumerate(items):
                    if current == item:
                        items[i] = item
                        replaced += 1
        return replaced

    def discard_everywhere(self, item: Any) -> int:
        """Drop an item from every account (used when a track is deleted)."""
        removed = 0
        with self._lock:
            for account_id in list(self._favorites):
                if self.remove(account_id, item):
                    removed += 1
        return removed
