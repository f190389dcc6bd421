"""Follow/unfollow and friend suggestions, addressed by handle."""

from __future__ import annotations
from typing import List, Optional, Tuple
from loguru import logger

from syncgraph.cache.identity_index import IdentityIndex
from syncgraph.graph.social_graph import SocialGraph
from syncgraph.models import Account


class SocialService:
    def __init__(self, identity: IdentityIndex, graph: SocialGraph,
                 suggestion_depth: int = 2):
        self.identity = identity
        self.graph = graph
        self.suggestion_depth = suggestion_depth

    def _pair(self, handle: Optional[str], other: Optional[str]) -> Optional[Tuple[Account, Account]]:
        account = self.identity.get(handle)
        target = self.identity.get(other)
        if account is None or target is None:
            logger.warning(f"Unknown account in pair ('{handle}', '{other}')")
            return None
        if account == target:
            logger.warning(f"'{handle}' cannot follow itself")
            return None
        return account, target

    def follow(self, handle: Optional[str], other: Optional[str]) -> bool:
        pair = self._pair(handle, other)
        if pair is None:
            return False
        self.graph.connect(*pair)
        logger.info(f"'{handle}' now follows '{other}'")
        return True

    def unfollow(self, handle: Optional[str], other: Optional[str]) -> bool:
        pair = self._pair(handle, other)
        if pair is None or not self.graph.is_connected(*pair):
            return False
        self.graph.disconnect(*pair)
        logger.info(f"'{handle}' unfollowed '{other}'")
        return True

    def following(self, handle: Optional[str]) -> List[Account]:
        """Connections of an account, sorted by handle."""
        account = self.identity.get(handle)
        return sorted(self.graph.connections(account), key=lambda a: a.handle)

    def is_following(self, handle: Optional[str], other: Optional[str]) -> bool:
        return self.graph.is_connected(self.identity.get(handle), self.identity.get(other))

    def suggestions(self, handle: Optional[str], max_results: int = 10) -> List[Account]:
        """Accounts reachable within the configured depth that are not yet followed."""
        account = self.identity.get(handle)
        if account is None:
            return []
        return self.graph.suggest(account, self.suggestion_depth, max_results)
