"""
Catalog service: track lifecycle plus the indexes that mirror it.

Every create/update/delete goes to the record store first and is then
reflected in memory:

- PrefixIndex: incremental insert/remove under the title and the artist
- SimilarityGraph: incremental edges on create, full rebuild on update/delete

Mutations are serialized by a catalog write lock so each one sees the
records saved by the previous one.
"""

from __future__ import annotations
import threading
from typing import Any, Dict, List, Optional, Sequence
from loguru import logger

from syncgraph.db.record_store import RecordStore
from syncgraph.errors import TrackNotFoundError
from syncgraph.graph.similarity_graph import SimilarityGraph
from syncgraph.io.audio_storage import AudioLocator
from syncgraph.models import Track
from syncgraph.services.favorites import FavoritesStore
from syncgraph.trie.prefix_index import PrefixIndex

DEFAULT_AUDIO_TRACKS = (
    "/audio/syncup_intro.wav",
    "/audio/syncup_groove.wav",
    "/audio/syncup_chill.wav",
)


def index_texts(track: Track) -> List[str]:
    """Texts a track is searchable under."""
    return [text for text in (track.title, track.artist) if text and text.strip()]


class CatalogService:
    def __init__(self, store: RecordStore, prefix_index: PrefixIndex,
                 similarity_graph: SimilarityGraph, audio: AudioLocator,
                 favorites: Optional[FavoritesStore] = None,
                 default_audio: Sequence[str] = DEFAULT_AUDIO_TRACKS):
        self.store = store
        self.prefix_index = prefix_index
        self.similarity_graph = similarity_graph
        self.audio = audio
        self.favorites = favorites
        self.default_audio = list(default_audio)
        self._write_lock = threading.RLock()

    # --- bootstrap ---

    def rebuild_indexes(self) -> Dict[str, Any]:
        """Reload the catalog and rebuild both indexes from scratch."""
        with self._write_lock:
            tracks = self.store.load_all_tracks()
            entries = [(text, track) for track in tracks for text in index_texts(track)]
            self.prefix_index.rebuild(entries)
            graph_stats = self.similarity_graph.build(tracks)
        return {"tracks": len(tracks), "index_entries": len(entries), **graph_stats}

    # --- lookups ---

    def get_track(self, track_id: Optional[int]) -> Optional[Track]:
        if track_id is None:
            return None
        return self.store.find_track_by_id(track_id)

    def require_track(self, track_id: Optional[int]) -> Track:
        track = self.get_track(track_id)
        if track is None:
            raise TrackNotFoundError(track_id)
        return track

    def list_tracks(self) -> List[Track]:
        return self.store.load_all_tracks()

    def autocomplete(self, prefix: Optional[str]) -> List[Track]:
        """Tracks whose title or artist starts with the prefix."""
        if not prefix or not prefix.strip():
            return []
        results = self.prefix_index.query(prefix)
        logger.debug(f"Autocomplete '{prefix}': {len(results)} tracks")
        return results

    def similar_tracks(self, track_id: int, limit: int = 10) -> List[Track]:
        track = self.require_track(track_id)
        return self.similarity_graph.top_direct_neighbors(track, limit)

    def path_between(self, origin_id: int, destination_id: int) -> List[Track]:
        origin = self.require_track(origin_id)
        destination = self.require_track(destination_id)
        return self.similarity_graph.best_path(origin, destination)

    # --- audio ---

    def default_audio_for(self, index: int) -> Optional[str]:
        """
        First available default audio, starting at ``index`` (round robin).

        Returns None when none of the defaults exist.
        """
        count = len(self.default_audio)
        for offset in range(count):
            candidate = self.default_audio[(abs(index) + offset) % count]
            if self.audio.exists(candidate):
                return candidate
        return None

    def _usable(self, reference: Optional[str]) -> bool:
        return bool(reference and reference.strip()) and self.audio.exists(reference)

    # --- lifecycle ---

    def create(self, track: Track) -> Track:
        """
        Add a track to the catalog.

        A track carrying the id of an existing record is routed through
        ``update`` so the indexes drop its old texts and edges.
        """
        with self._write_lock:
            if track.track_id is not None and self.get_track(track.track_id) is not None:
                logger.warning(f"Track {track.track_id} already exists, updating instead")
                return self.update(track.track_id, track)

            if not self._usable(track.audio_ref):
                track = track.copy()
                track.audio_ref = self.default_audio_for(self.store.count_tracks())

            saved = self.store.save_track(track)

            for text in index_texts(saved):
                self.prefix_index.insert(text, saved)
            self.similarity_graph.add_track(saved, self.store.load_all_tracks())

        logger.info(f"Track '{saved.title}' created with id {saved.track_id}")
        return saved

    def update(self, track_id: int, changes: Track) -> Track:
        """
        Replace a track's metadata.

        The audio reference is taken from ``changes`` when it is available;
        otherwise the current one is kept if still reachable, or replaced by
        a default (or cleared when no default exists).
        """
        with self._write_lock:
            current = self.require_track(track_id)
            previous = current.copy()

            updated = current.copy()
            updated.title = changes.title
            updated.artist = changes.artist
            updated.genre = changes.genre
            updated.year = changes.year
            updated.duration = changes.duration
            if self._usable(changes.audio_ref):
                updated.audio_ref = changes.audio_ref
            elif not self._usable(updated.audio_ref):
                updated.audio_ref = self.default_audio_for(track_id or 0)

            saved = self.store.save_track(updated)

            for text in index_texts(previous):
                self.prefix_index.remove(text, previous)
            for text in index_texts(saved):
                self.prefix_index.insert(text, saved)
            # Edge weights depend on every field; no incremental update
            self.similarity_graph.build(self.store.load_all_tracks())
            if self.favorites is not None:
                self.favorites.replace_everywhere(saved)

        logger.info(f"Track {track_id} updated")
        return saved

    def delete(self, track_id: int) -> Track:
        with self._write_lock:
            track = self.require_track(track_id)
            self.store.delete_track(track_id)

            for text in index_texts(track):
                self.prefix_index.remove(text, track)
            self.similarity_graph.build(self.store.load_all_tracks())
            if self.favorites is not None:
                self.favorites.discard_everywhere(track)

        logger.info(f"Track {track_id} deleted")
        return track

    def repair_audio(self) -> Dict[str, int]:
        """
        Startup pass over stored tracks whose audio is unreachable.

        Each one gets a default audio (round robin by catalog position); a
        track for which no default exists either is deleted. Indexes are not
        touched, so run this before ``rebuild_indexes``.

        Returns:
            Counts of assigned defaults and removed tracks
        """
        assigned = 0
        removed = 0
        with self._write_lock:
            for i, track in enumerate(self.store.load_all_tracks()):
                if self._usable(track.audio_ref):
                    continue
                default = self.default_audio_for(i)
                if default is not None:
                    track.audio_ref = default
                    self.store.save_track(track)
                    assigned += 1
                else:
                    logger.warning(f"Removing track '{track.title}' (id {track.track_id}): no audio available")
                    self.store.delete_track(track.track_id)
                    removed += 1

        if assigned or removed:
            logger.info(f"Audio repair: {assigned} defaults assigned, {removed} tracks removed")
        return {"audio_assigned": assigned, "audio_removed": removed}
