"""
Process-scoped container wiring the store, the engines and the services.

One ``SyncGraph`` owns every in-memory structure; nothing lives in module
globals. ``bootstrap`` performs the startup bulk load.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional
from loguru import logger

from syncgraph.cache.identity_index import IdentityIndex
from syncgraph.config import Settings
from syncgraph.db.record_store import RecordStore, SqlRecordStore
from syncgraph.graph.similarity_graph import SimilarityGraph
from syncgraph.graph.social_graph import SocialGraph
from syncgraph.io.audio_storage import AudioLocator, LocalAudioStorage
from syncgraph.models import Track
from syncgraph.services import metrics
from syncgraph.services.accounts import AccountService
from syncgraph.services.catalog import CatalogService
from syncgraph.services.favorites import FavoritesStore
from syncgraph.services.recommendations import RecommendationEngine
from syncgraph.services.search import AdvancedSearch
from syncgraph.services.social import SocialService
from syncgraph.trie.prefix_index import PrefixIndex


class SyncGraph:
    """
    All engines and services of one SyncGraph process.

    Engines:
    - prefix_index, similarity_graph, social_graph, identity, favorites

    Services:
    - catalog, search, social, accounts, recommendations
    """

    def __init__(self, store: RecordStore, audio: AudioLocator,
                 settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.store = store
        self.audio = audio

        self.prefix_index = PrefixIndex()
        self.similarity_graph = SimilarityGraph()
        self.social_graph = SocialGraph()
        self.identity = IdentityIndex(store)
        self.favorites = FavoritesStore()

        self.catalog = CatalogService(
            store, self.prefix_index, self.similarity_graph, audio,
            favorites=self.favorites, default_audio=self.settings.default_audio,
        )
        self.search = AdvancedSearch(store, max_workers=self.settings.search_max_workers)
        self.social = SocialService(self.identity, self.social_graph,
                                    suggestion_depth=self.settings.suggestion_depth)
        self.accounts = AccountService(store, self.identity,
                                       social_graph=self.social_graph, favorites=self.favorites)
        self.recommendations = RecommendationEngine(self.favorites, self.similarity_graph)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SyncGraph":
        store = SqlRecordStore(settings.db_url)
        audio = LocalAudioStorage(settings.audio_upload_dir, settings.audio_static_dir)
        return cls(store, audio, settings)

    def bootstrap(self) -> Dict[str, Any]:
        """
        Repair stored audio references, then load the catalog and the
        accounts into memory.

        Returns:
            Statistics about what was loaded
        """
        logger.info("Bootstrapping in-memory indexes...")
        audio_stats = self.catalog.repair_audio()
        catalog_stats = self.catalog.rebuild_indexes()
        loaded = self.identity.load(self.store.load_all_accounts())
        repair = self.identity.reconcile()

        stats = {**audio_stats, **catalog_stats, "accounts": loaded}
        stats.update({f"identity_{k}": v for k, v in repair.items()})
        logger.success(f"Bootstrap complete: {catalog_stats['tracks']} tracks, {loaded} accounts")
        return stats

    # --- favorites, addressed by handle and track id ---

    def add_favorite(self, handle: str, track_id: int) -> bool:
        account = self.accounts.require(handle)
        track = self.catalog.require_track(track_id)
        return self.favorites.add(account.handle, track)

    def remove_favorite(self, handle: str, track_id: int) -> bool:
        account = self.accounts.require(handle)
        track = self.catalog.require_track(track_id)
        return self.favorites.remove(account.handle, track)

    def list_favorites(self, handle: str) -> List[Track]:
        return self.favorites.list(self.accounts.require(handle).handle)

    def export_favorites(self, handle: str) -> bytes:
        return metrics.export_favorites_csv(self.list_favorites(handle))

    # --- recommendations ---

    def discovery(self, handle: str, max_items: Optional[int] = None) -> List[Track]:
        account = self.accounts.require(handle)
        size = self.settings.discovery_size if max_items is None else max_items
        return self.recommendations.discover(account.handle, size)

    def radio(self, track_id: int, max_items: Optional[int] = None) -> List[Track]:
        seed = self.catalog.require_track(track_id)
        size = self.settings.radio_size if max_items is None else max_items
        return self.recommendations.radio(seed, size)

    # --- admin metrics ---

    def genre_metrics(self) -> Dict[str, int]:
        return metrics.genre_counts(self.store.load_all_tracks())

    def artist_metrics(self, top: int = 10) -> Dict[str, int]:
        return metrics.top_artists(self.store.load_all_tracks(), top)

    def close(self):
        close = getattr(self.store, "close", None)
        if close is not None:
            close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
