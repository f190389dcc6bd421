"""
Track similarity graph using NetworkX.

This module provides a weighted, undirected view of the catalog where each
edge weight encodes how similar two tracks are, plus the two retrieval
primitives built on it:

- top_direct_neighbors: single-hop ranking by edge weight ("similar tracks")
- best_path: global search through intermediate tracks, maximizing
  cumulative similarity ("connect these two tracks")
"""

from __future__ import annotations
import threading
from typing import Any, Dict, Iterable, List, Optional, Set
import networkx as nx
from loguru import logger

from syncgraph.models import Track

SIMILARITY_THRESHOLD = 0.3

GENRE_WEIGHT = 0.5
ARTIST_WEIGHT = 0.4
YEAR_WEIGHT = 0.3
YEAR_WINDOW = 5


def _same_text(a: Optional[str], b: Optional[str]) -> bool:
    if not a or not b:
        return False
    return a.casefold() == b.casefold()


def similarity(a: Optional[Track], b: Optional[Track]) -> float:
    """
    Score how similar two tracks are, in [0, 1].

    - Same genre: +0.5
    - Same artist (case-insensitive): +0.4
    - Release years at most 5 apart: +0.3 * (1 - |dy| / 5)

    The same track (by identifier) scores 1.0 by convention.
    """
    if a is None or b is None or a == b:
        return 1.0

    score = 0.0
    if _same_text(a.genre, b.genre):
        score += GENRE_WEIGHT
    if _same_text(a.artist, b.artist):
        score += ARTIST_WEIGHT
    if a.year is not None and b.year is not None:
        delta = abs(a.year - b.year)
        if delta <= YEAR_WINDOW:
            score += YEAR_WEIGHT * (1.0 - delta / YEAR_WINDOW)

    return min(score, 1.0)


def _edge_cost(u: Any, v: Any, data: Dict[str, Any]) -> float:
    # Higher similarity means a cheaper hop
    return 1.0 - data.get("weight", 0.0)


class SimilarityGraph:
    """
    Weighted undirected similarity graph over tracks.

    Backed by an ``nx.Graph`` so every pair has exactly one weight and the
    (a, b) / (b, a) symmetry holds by construction. Full rebuilds happen on a
    fresh graph that is swapped in under the lock, so readers never observe a
    half-built graph.
    """

    def __init__(self, threshold: float = SIMILARITY_THRESHOLD):
        self.threshold = threshold
        self.graph = nx.Graph()
        self._lock = threading.RLock()

    # --- scoring / construction ---

    @staticmethod
    def similarity(a: Optional[Track], b: Optional[Track]) -> float:
        return similarity(a, b)

    def add_edge(self, a: Optional[Track], b: Optional[Track], weight: float) -> None:
        """Set the weight between two tracks. Self pairs and None are ignored."""
        if a is None or b is None or a == b:
            return

        weight = min(max(float(weight), 0.0), 1.0)
        with self._lock:
            self.graph.add_edge(a, b, weight=weight)

        logger.debug(f"Edge added: {a.title} <-> {b.title} weight={weight:.3f}")

    def build(self, tracks: Iterable[Track]) -> Dict[str, Any]:
        """
        Rebuild the graph from the full catalog.

        Every unordered pair is scored (O(n^2)); pairs at or above the
        threshold become edges.

        Args:
            tracks: All catalog tracks

        Returns:
            Statistics about the built graph
        """
        tracks = [t for t in tracks if t is not None]
        logger.info(f"Building similarity graph from {len(tracks)} tracks...")

        fresh = nx.Graph()
        for i, a in enumerate(tracks):
            for b in tracks[i + 1:]:
                if a == b:
                    continue
                score = similarity(a, b)
                if score >= self.threshold:
                    fresh.add_edge(a, b, weight=score)

        with self._lock:
            self.graph = fresh

        stats = {
            "tracks": len(tracks),
            "nodes": fresh.number_of_nodes(),
            "edges": fresh.number_of_edges(),
        }
        logger.success(f"Similarity graph built: {stats['nodes']} nodes, {stats['edges']} edges")
        return stats

    def add_track(self, track: Optional[Track], existing: Iterable[Track]) -> int:
        """
        Connect a newly inserted track to the current catalog.

        Updates and deletions are not incremental; they require ``build``.

        Returns:
            Number of edges created
        """
        if track is None:
            return 0

        scored = []
        for other in existing:
            if other is None or other == track:
                continue
            score = similarity(track, other)
            if score >= self.threshold:
                scored.append((other, score))

        # All edges land in the same graph, even across a concurrent build swap
        with self._lock:
            for other, score in scored:
                self.graph.add_edge(track, other, weight=min(score, 1.0))
        created = len(scored)

        logger.debug(f"Track '{track.title}' linked to {created} tracks")
        return created

    # --- adjacency reads ---

    def neighbors(self, track: Optional[Track]) -> List[Track]:
        with self._lock:
            if track is None or track not in self.graph:
                return []
            return list(self.graph.neighbors(track))

    def weight(self, a: Optional[Track], b: Optional[Track]) -> Optional[float]:
        with self._lock:
            if a is None or b is None:
                return None
            data = self.graph.get_edge_data(a, b)
            return None if data is None else data.get("weight")

    def has_edge(self, a: Optional[Track], b: Optional[Track]) -> bool:
        if a is None or b is None:
            return False
        with self._lock:
            return self.graph.has_edge(a, b)

    def nodes(self) -> Set[Track]:
        with self._lock:
            return set(self.graph.nodes())

    def number_of_nodes(self) -> int:
        with self._lock:
            return self.graph.number_of_nodes()

    def number_of_edges(self) -> int:
        with self._lock:
            return self.graph.number_of_edges()

    def is_empty(self) -> bool:
        return self.number_of_nodes() == 0

    # --- retrieval ---

    def top_direct_neighbors(self, origin: Optional[Track], k: int) -> List[Track]:
        """
        Rank the origin's direct neighbors by edge weight, highest first.

        This is a single-hop ranking, not a multi-hop search.

        Args:
            origin: Track to rank neighbors for
            k: Maximum number of tracks to return

        Returns:
            At most k tracks, never including the origin
        """
        if origin is None or k <= 0:
            return []

        with self._lock:
            if origin not in self.graph:
                return []
            ranked = sorted(
                self.graph[origin].items(),
                key=lambda item: item[1].get("weight", 0.0),
                reverse=True,
            )

        return [track for track, _ in ranked if track != origin][:k]

    def best_path(self, origin: Optional[Track], destination: Optional[Track]) -> List[Track]:
        """
        Find the path between two tracks that maximizes cumulative similarity.

        Runs Dijkstra with ``1 - weight`` as the edge cost. Ties are broken by
        discovery order.

        Returns:
            Tracks from origin to destination inclusive, [origin] when both
            are the same track, or [] when no path exists
        """
        if origin is None or destination is None:
            return []
        if origin == destination:
            return [origin]

        with self._lock:
            try:
                return nx.dijkstra_path(self.graph, origin, destination, weight=_edge_cost)
            except (nx.NetworkXNoPath, nx.NodeNotFound):
                logger.debug(f"No path between '{origin.title}' and '{destination.title}'")
                return []

    def get_graph_stats(self) -> Dict[str, Any]:
        """Get statistics about the graph."""
        with self._lock:
            graph = self.graph
            if graph.number_of_nodes() == 0:
                return {
                    "nodes": 0,
                    "edges": 0,
                    "density": 0.0,
                    "avg_degree": 0.0,
                    "connected_components": 0,
                }

            degrees = [d for _, d in graph.degree()]
            return {
                "nodes": graph.number_of_nodes(),
                "edges": graph.number_of_edges(),
                "density": nx.density(graph),
                "avg_degree": sum(degrees) / len(degrees),
                "max_degree": max(degrees),
                "min_degree": min(degrees),
                "connected_components": nx.number_connected_components(graph),
            }
