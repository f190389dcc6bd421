"""
Services module for SyncGraph.

This module provides the request-facing operations built on the in-memory
engines: catalog maintenance, search, social features, favorites,
recommendations and catalog metrics.
"""

from .accounts import AccountService
from .catalog import CatalogService
from .favorites import FavoritesStore
from .recommendations import RecommendationEngine
from .search import AdvancedSearch, SearchCriteria, SearchResult
from .social import SocialService

__all__ = [
    "AccountService",
    "AdvancedSearch",
    "CatalogService",
    "FavoritesStore",
    "RecommendationEngine",
    "SearchCriteria",
    "SearchResult",
    "SocialService",
]
