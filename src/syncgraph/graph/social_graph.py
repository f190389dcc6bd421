"""
Social graph of accounts using NetworkX.

Following is modeled as a symmetric connection: the graph does not tell a
follower from a followee. Suggestions come from a breadth-first search that
surfaces accounts reachable through existing connections.
"""

from __future__ import annotations
import collections
import threading
from typing import List, Optional, Set
import networkx as nx
from loguru import logger

from syncgraph.models import Account


class SocialGraph:
    """Unweighted undirected graph of account connections."""

    def __init__(self):
        self.graph = nx.Graph()
        self._lock = threading.RLock()

    def connect(self, a: Optional[Account], b: Optional[Account]) -> None:
        if a is None or b is None or a == b:
            return
        with self._lock:
            self.graph.add_edge(a, b)
        logger.debug(f"'{a.handle}' connected with '{b.handle}'")

    def disconnect(self, a: Optional[Account], b: Optional[Account]) -> None:
        """Remove the connection and drop accounts left without connections."""
        if a is None or b is None:
            return
        with self._lock:
            if self.graph.has_edge(a, b):
                self.graph.remove_edge(a, b)
            for account in (a, b):
                if account in self.graph and self.graph.degree(account) == 0:
                    self.graph.remove_node(account)
        logger.debug(f"'{a.handle}' disconnected from '{b.handle}'")

    def connections(self, account: Optional[Account]) -> Set[Account]:
        with self._lock:
            if account is None or account not in self.graph:
                return set()
            return set(self.graph.neighbors(account))

    def is_connected(self, a: Optional[Account], b: Optional[Account]) -> bool:
        if a is None or b is None:
            return False
        with self._lock:
            return self.graph.has_edge(a, b)

    def degree(self, account: Optional[Account]) -> int:
        with self._lock:
            if account is None or account not in self.graph:
                return 0
            return self.graph.degree(account)

    def nodes(self) -> Set[Account]:
        with self._lock:
            return set(self.graph.nodes())

    def number_of_nodes(self) -> int:
        with self._lock:
            return self.graph.number_of_nodes()

    def is_empty(self) -> bool:
        return self.number_of_nodes() == 0

    def clear(self) -> None:
        with self._lock:
            self.graph = nx.Graph()
        logger.info("Social graph cleared")

    def suggest(self, origin: Optional[Account], max_depth: int, max_results: int) -> List[Account]:
        """
        Suggest accounts reachable through existing connections.

        The search starts from the origin's direct connections (depth 1).
        Those are already connected and never suggested; accounts first
        discovered deeper than that are emitted in discovery order.

        Args:
            origin: Account to build suggestions for
            max_depth: Maximum number of hops from the origin
            max_results: Maximum suggestions to return

        Returns:
            Suggested accounts, at most max_results
        """
        if origin is None or max_depth < 1 or max_results <= 0:
            return []

        with self._lock:
            if origin not in self.graph:
                return []
            # Adjacency order keeps the discovery order deterministic
            first_hop = list(self.graph.neighbors(origin))
            direct = set(first_hop)
            visited = {origin} | direct
            queue = collections.deque((friend, 1) for friend in first_hop)
            suggestions: List[Account] = []

            while queue and len(suggestions) < max_results:
                current, depth = queue.popleft()

                if depth > 1 and current not in direct and current != origin:
                    suggestions.append(current)

                if depth < max_depth:
                    for neighbor in self.graph.neighbors(current):
                        if neighbor not in visited:
                            visited.add(neighbor)
                            queue.append((neighbor, depth + 1))

        logger.debug(f"Found {len(suggestions)} suggestions for '{origin.handle}'")
        return suggestions

    def reachable(self, origin: Optional[Account], max_depth: int) -> Set[Account]:
        """All accounts within max_depth hops of the origin, excluding it."""
        if origin is None or max_depth < 1:
            return set()

        with self._lock:
            if origin not in self.graph:
                return set()
            lengths = nx.single_source_shortest_path_length(self.graph, origin, cutoff=max_depth)

        lengths.pop(origin, None)
        return set(lengths)

    def within_reach(self, origin: Optional[Account], target: Optional[Account],
                     max_depth: int) -> bool:
        if target is None:
            return False
        return target in self.reachable(origin, max_depth)


def suggest(graph: Optional[SocialGraph], origin: Optional[Account],
            max_depth: int = 2, max_results: int = 10) -> List[Account]:
    """Suggestion search that tolerates a missing graph."""
    if graph is None:
        return []
    return graph.suggest(origin, max_depth, max_results)
