"""
In-memory index of accounts keyed by handle.

The index is bulk-loaded at startup and patched per entry afterwards. Writes
can race with cache population and leave an entry without its credential
hash, so reads follow an explicit cache policy:

- ``peek``: plain lookup, never touches the store
- ``get``: read, detect an incomplete entry, refetch that handle, replace
- ``reconcile``: run the same repair over every incomplete entry
"""

from __future__ import annotations
import threading
from typing import Dict, Iterable, List, Optional, Protocol
from loguru import logger

from syncgraph.models import Account


class AccountSource(Protocol):
    def find_account_by_handle(self, handle: str) -> Optional[Account]: ...


class IdentityIndex:
    """Handle -> account map with read-repair against the record store."""

    def __init__(self, source: AccountSource):
        """
        Initialize the identity index.

        Args:
            source: Store used to refetch incomplete entries
        """
        self.source = source
        self._accounts: Dict[str, Account] = {}
        self._lock = threading.RLock()

    def load(self, accounts: Iterable[Account]) -> int:
        """Replace the whole index. Returns the number of loaded accounts."""
        fresh: Dict[str, Account] = {}
        for account in accounts:
            if account is None or not account.handle:
                continue
            if not account.has_credentials:
                logger.warning(f"Account '{account.handle}' loaded without credential hash")
            fresh[account.handle] = account

        with self._lock:
            self._accounts = fresh

        logger.info(f"{len(fresh)} accounts loaded into identity index")
        return len(fresh)

    def peek(self, handle: Optional[str]) -> Optional[Account]:
        """Strict lookup, no refetch."""
        if not handle:
            return None
        with self._lock:
            return self._accounts.get(handle)

    def _refetch(self, handle: str) -> Optional[Account]:
        """Fetch a handle from the store, keeping it only if it has credentials."""
        fresh = self.source.find_account_by_handle(handle)
        if fresh is not None and fresh.has_credentials:
            return fresh
        return None

    def get(self, handle: Optional[str]) -> Optional[Account]:
        """
        Look up an account, repairing it if its credential hash is missing.

        Returns:
            The repaired account, the cached (possibly incomplete) account when
            the store cannot repair it, or None for unknown handles
        """
        cached = self.peek(handle)
        if cached is None or cached.has_credentials:
            return cached

        logger.warning(f"Account '{handle}' cached without credential hash, reloading")
        fresh = self._refetch(handle)
        if fresh is None:
            logger.error(f"Account '{handle}' has no credential hash in the store either")
            return cached

        with self._lock:
            # Only replace if nobody put a newer entry meanwhile
            if self._accounts.get(handle) is cached:
                self._accounts[handle] = fresh
        logger.info(f"Account '{handle}' reloaded from the store")
        return fresh

    def put(self, account: Optional[Account]) -> None:
        """Insert or replace an account, repairing it first if needed."""
        if account is None or not account.handle:
            logger.warning("Ignoring empty account for identity index")
            return

        if not account.has_credentials:
            logger.warning(f"Account '{account.handle}' added without credential hash")
            fresh = self._refetch(account.handle)
            if fresh is not None:
                account = fresh
            else:
                logger.error(f"Account '{account.handle}' has no credential hash in the store")

        with self._lock:
            self._accounts[account.handle] = account

    def remove(self, handle: Optional[str]) -> bool:
        if not handle:
            return False
        with self._lock:
            return self._accounts.pop(handle, None) is not None

    def contains(self, handle: Optional[str]) -> bool:
        if not handle:
            return False
        with self._lock:
            return handle in self._accounts

    def accounts(self) -> List[Account]:
        with self._lock:
            return list(self._accounts.values())

    def incomplete(self) -> List[str]:
        """Handles whose cached entry lacks a credential hash."""
        with self._lock:
            return [h for h, a in self._accounts.items() if not a.has_credentials]

    def reconcile(self) -> Dict[str, int]:
        """
        Repair every incomplete entry from the store.

        Returns:
            Counts of repaired and still-incomplete entries
        """
        repaired = 0
        missing = 0
        for handle in self.incomplete():
            before = self.peek(handle)
            account = self.get(handle)
            if account is not None and account.has_credentials and account is not before:
                repaired += 1
            else:
                missing += 1

        if repaired or missing:
            logger.info(f"Identity reconciliation: {repaired} repaired, {missing} still incomplete")
        return {"repaired": repaired, "incomplete": missing}

    def __len__(self) -> int:
        with self._lock:
            return len(self._accounts)
