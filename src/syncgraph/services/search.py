"""
Multi-criteria catalog search.

Each criterion (artist, genre, year) becomes an independent sub-query
against the record store. Sub-queries run concurrently and are all awaited
before their results are combined:

- AND: intersection of the result sets of every requested criterion
- OR: union, in first-seen order, without duplicates

A failing sub-query is reported in the result rather than being mistaken
for an empty match.
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from loguru import logger

from syncgraph.db.record_store import RecordStore
from syncgraph.errors import SearchError
from syncgraph.models import Track

AND = "AND"
OR = "OR"


@dataclass
class SearchCriteria:
    artist: Optional[str] = None
    genre: Optional[str] = None
    year: Optional[int] = None
    operator: str = AND

    def has_criteria(self) -> bool:
        return bool(
            (self.artist and self.artist.strip())
            or (self.genre and self.genre.strip())
            or self.year is not None
        )

    @property
    def normalized_operator(self) -> str:
        return OR if (self.operator or "").strip().upper() == OR else AND


@dataclass
class SubQueryResult:
    """Outcome of one sub-query: either items or the error it raised."""

    name: str
    items: List[Track] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SearchResult:
    items: List[Track]
    operator: str
    subqueries: Dict[str, SubQueryResult] = field(default_factory=dict)

    @property
    def failures(self) -> Dict[str, BaseException]:
        return {name: r.error for name, r in self.subqueries.items() if r.error is not None}

    @property
    def partial(self) -> bool:
        """True when at least one sub-query failed; items cover the rest only."""
        return bool(self.failures)

    def raise_for_failures(self) -> "SearchResult":
        if self.partial:
            raise SearchError(self.failures)
        return self


def intersect(result_sets: List[List[Track]]) -> List[Track]:
    """Tracks present in every list, in the order of the first list."""
    if not result_sets:
        return []
    common = set(result_sets[0])
    for items in result_sets[1:]:
        common &= set(items)
    seen = set()
    ordered = []
    for track in result_sets[0]:
        if track in common and track not in seen:
            seen.add(track)
            ordered.append(track)
    return ordered


def union(result_sets: List[List[Track]]) -> List[Track]:
    merged: Dict[Track, None] = {}
    for items in result_sets:
        for track in items:
            merged.setdefault(track, None)
    return list(merged)


class AdvancedSearch:
    """Concurrent multi-criteria search over the record store."""

    def __init__(self, store: RecordStore, max_workers: int = 3):
        self.store = store
        self.max_workers = max_workers

    def _subqueries(self, criteria: SearchCriteria) -> Dict[str, Callable[[], List[Track]]]:
        queries: Dict[str, Callable[[], List[Track]]] = {}
        if criteria.artist and criteria.artist.strip():
            artist = criteria.artist.strip()
            queries["artist"] = lambda: self.store.find_tracks_by_artist(artist)
        if criteria.genre and criteria.genre.strip():
            genre = criteria.genre.strip()
            queries["genre"] = lambda: self.store.find_tracks_by_genre(genre)
        if criteria.year is not None:
            year = criteria.year
            queries["year"] = lambda: self.store.find_tracks_by_year(year)
        return queries

    def search(self, criteria: SearchCriteria) -> SearchResult:
        """
        Run every requested sub-query concurrently and combine the results.

        Args:
            criteria: Attribute filters and the AND/OR operator

        Returns:
            SearchResult with the combined items and per-sub-query outcomes
        """
        operator = criteria.normalized_operator
        queries = self._subqueries(criteria)
        if not queries:
            return SearchResult(items=[], operator=operator)

        logger.debug(f"Advanced search on {sorted(queries)} with {operator}")

        outcomes: Dict[str, SubQueryResult] = {}
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(queries))) as pool:
            futures = {pool.submit(query): name for name, query in queries.items()}
            for fut in as_completed(futures):
                name = futures[fut]
                try:
                    outcomes[name] = SubQueryResult(name=name, items=list(fut.result()))
                except Exception as e:
                    logger.error(f"Search sub-query '{name}' failed: {e}")
                    outcomes[name] = SubQueryResult(name=name, error=e)

        # Combine in a stable criterion order, independent of completion order
        ordered = [outcomes[name] for name in queries]
        result_sets = [r.items for r in ordered if r.ok]
        items = union(result_sets) if operator == OR else intersect(result_sets)

        result = SearchResult(items=items, operator=operator,
                              subqueries={r.name: r for r in ordered})
        if result.partial:
            logger.warning(f"Advanced search returned partial results; failed: {sorted(result.failures)}")
        else:
            logger.debug(f"Advanced search finished with {len(items)} results")
        return result
