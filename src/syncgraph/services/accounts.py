"""
Account lookups and profile maintenance.

The record store stays the source of truth; every write is mirrored into
the identity index so handle lookups never go to the store on the hot path.
Credential hashing happens upstream: this service stores whatever hash it
is given.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional
from loguru import logger

from syncgraph.cache.identity_index import IdentityIndex
from syncgraph.db.record_store import RecordStore
from syncgraph.errors import AccountNotFoundError
from syncgraph.graph.social_graph import SocialGraph
from syncgraph.models import Account
from syncgraph.services.favorites import FavoritesStore


class AccountService:
    def __init__(self, store: RecordStore, identity: IdentityIndex,
                 social_graph: Optional[SocialGraph] = None,
                 favorites: Optional[FavoritesStore] = None):
        self.store = store
        self.identity = identity
        self.social_graph = social_graph
        self.favorites = favorites

    def lookup(self, handle: Optional[str]) -> Optional[Account]:
        return self.identity.get(handle)

    def require(self, handle: Optional[str]) -> Account:
        account = self.lookup(handle)
        if account is None:
            raise AccountNotFoundError(handle)
        return account

    def register(self, account: Account) -> Account:
        """Persist a new (or replaced) account and index it."""
        saved = self.store.save_account(account)
        self.identity.put(saved)
        logger.info(f"Account '{saved.handle}' registered")
        return saved

    def update_profile(self, handle: str, display_name: Optional[str] = None,
                       password_hash: Optional[str] = None) -> Account:
        """
        Change the display name and/or credential hash of an account.

        Args:
            handle: Account handle
            display_name: New display name, unchanged when None or blank
            password_hash: New credential hash, unchanged when None or blank

        Returns:
            The updated account

        Raises:
            AccountNotFoundError: If the handle is unknown
        """
        current = self.require(handle)
        updated = Account(
            account_id=current.account_id,
            handle=current.handle,
            password_hash=password_hash if password_hash else current.password_hash,
            display_name=display_name.strip() if display_name and display_name.strip()
            else current.display_name,
            role=current.role,
        )
        saved = self.store.save_account(updated)
        self.identity.put(saved)
        logger.info(f"Account '{handle}' updated")
        return saved

    def delete(self, handle: str) -> Account:
        account = self.require(handle)
        self.store.delete_account(handle)
        self.identity.remove(handle)

        if self.social_graph is not None:
            for other in self.social_graph.connections(account):
                self.social_graph.disconnect(account, other)
        if self.favorites is not None:
            for track in self.favorites.list(handle):
                self.favorites.remove(handle, track)

        logger.info(f"Account '{handle}' deleted")
        return account

    def list_accounts(self) -> List[Dict[str, Any]]:
        """Public view of every indexed account, sorted by handle."""
        accounts = sorted(self.identity.accounts(), key=lambda a: a.handle)
        return [account.to_dict() for account in accounts]
