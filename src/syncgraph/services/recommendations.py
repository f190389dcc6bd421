"""
Discovery and radio lists derived from favorites and the similarity graph.

Both lists use the graph's single-hop ranking (top_direct_neighbors). The
multi-hop search (best_path) is exposed separately through ``connect``.
"""

from __future__ import annotations
from typing import Dict, List, Optional
from loguru import logger

from syncgraph.graph.similarity_graph import SimilarityGraph
from syncgraph.models import Track
from syncgraph.services.favorites import FavoritesStore

NEIGHBORS_PER_FAVORITE = 5


class RecommendationEngine:
    def __init__(self, favorites: FavoritesStore, graph: SimilarityGraph):
        self.favorites = favorites
        self.graph = graph

    def discover(self, account_id: str, max_items: int) -> List[Track]:
        """
        Build a discovery list for an account.

        For each favorite, in favorites order, take its top 5 direct
        neighbors, skip anything already favorited, and collect unique tracks
        until max_items is reached.
        """
        if max_items <= 0:
            return []

        favorites = self.favorites.list(account_id)
        if not favorites:
            logger.debug(f"'{account_id}' has no favorites, nothing to discover")
            return []

        liked = set(favorites)
        picks: Dict[Track, None] = {}
        for favorite in favorites:
            for track in self.graph.top_direct_neighbors(favorite, NEIGHBORS_PER_FAVORITE):
                if track in liked or track in picks:
                    continue
                picks[track] = None
                if len(picks) >= max_items:
                    break
            if len(picks) >= max_items:
                break

        logger.debug(f"Discovery for '{account_id}': {len(picks)} tracks")
        return list(picks)

    def radio(self, seed: Optional[Track], max_items: int) -> List[Track]:
        """Seed track followed by its closest direct neighbors."""
        if seed is None or max_items <= 0:
            return []

        queue = [seed]
        for track in self.graph.top_direct_neighbors(seed, max_items - 1):
            if len(queue) >= max_items:
                break
            if track != seed:
                queue.append(track)

        logger.debug(f"Radio from '{seed.title}': {len(queue)} tracks")
        return queue

    def connect(self, origin: Optional[Track], destination: Optional[Track]) -> List[Track]:
        """Chain of tracks linking origin to destination through similar tracks."""
        return self.graph.best_path(origin, destination)
