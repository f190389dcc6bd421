"""
Tests for favorites lists and the recommendation engine.
"""

import pytest

from syncgraph.graph.similarity_graph import SimilarityGraph
from syncgraph.models import Track
from syncgraph.services.favorites import FavoritesStore
from syncgraph.services.recommendations import RecommendationEngine


def make_track(track_id, genre="Rock", artist="Queen", year=1975):
    return Track(track_id=track_id, title=f"Track {track_id}", artist=artist, genre=genre, year=year)


class TestFavoritesStore:
    """Tests for FavoritesStore."""

    def setup_method(self):
        self.favorites = FavoritesStore()
        self.t1, self.t2 = make_track(1), make_track(2)

    def test_add_is_ordered_and_unique(self):
        """Test that favorites keep insertion order without duplicates."""
        assert self.favorites.add("ana", self.t2)
        assert self.favorites.add("ana", self.t1)
        assert not self.favorites.add("ana", self.t2)
        assert self.favorites.list("ana") == [self.t2, self.t1]
        assert self.favorites.count("ana") == 2

    def test_remove_drops_empty_entry(self):
        """Test removing the last favorite of a user."""
        self.favorites.add("ana", self.t1)
        assert self.favorites.remove("ana", self.t1)
        assert not self.favorites.remove("ana", self.t1)
        assert self.favorites.list("ana") == []
        assert "ana" not in self.favorites._favorites

    def test_list_is_a_copy(self):
        """Test that the listed favorites can be modified freely."""
        self.favorites.add("ana", self.t1)
        self.favorites.list("ana").append(self.t2)
        assert self.favorites.list("ana") == [self.t1]

    def test_invalid_input(self):
        """Test blank handles and missing tracks."""
        assert not self.favorites.add("", self.t1)
        assert not self.favorites.add("ana", None)
        assert self.favorites.list("nobody") == []

    def test_discard_everywhere(self):
        """Test removing a track from every user."""
        self.favorites.add("ana", self.t1)
        self.favorites.add("ben", self.t1)
        self.favorites.add("ben", self.t2)
        assert self.favorites.discard_everywhere(make_track(1)) == 2
        assert self.favorites.list("ben") == [self.t2]

    def test_replace_everywhere_keeps_position(self):
        """Test swapping in a newer version of a track for every user."""
        self.favorites.add("ana", self.t1)
        self.favorites.add("ben", self.t2)
        self.favorites.add("ben", self.t1)
        renamed = Track(track_id=1, title="So What", artist="Miles Davis", genre="Jazz", year=1959)

        assert self.favorites.replace_everywhere(renamed) == 2
        assert self.favorites.list("ana")[0].title == "So What"
        assert [t.title for t in self.favorites.list("ben")] == ["Track 2", "So What"]
        assert self.favorites.replace_everywhere(make_track(99)) == 0
        assert self.favorites.replace_everywhere(None) == 0


class TestRecommendationEngine:
    """Tests for discovery and radio lists."""

    def setup_method(self):
        self.graph = SimilarityGraph()
        self.seed = make_track(1)
        # Neighbors of the seed with decreasing weights
        self.n = [make_track(i) for i in range(2, 9)]
        for i, track in enumerate(self.n):
            self.graph.add_edge(self.seed, track, 0.95 - i * 0.05)
        self.other = make_track(20, genre="Jazz")
        self.other_neighbor = make_track(21, genre="Jazz")
        self.graph.add_edge(self.other, self.other_neighbor, 0.8)

        self.favorites = FavoritesStore()
        self.engine = RecommendationEngine(self.favorites, self.graph)

    def test_discover_without_favorites(self):
        """Test discovery for a user with no favorites."""
        assert self.engine.discover("ana", 10) == []

    def test_discover_takes_top_five_per_favorite(self):
        """Test that discovery takes the top five neighbors of each favorite."""
        self.favorites.add("ana", self.seed)
        assert self.engine.discover("ana", 10) == self.n[:5]

    def test_discover_skips_favorites_and_respects_limit(self):
        """Test that discovery skips favorites and stops at the limit."""
        self.favorites.add("ana", self.seed)
        self.favorites.add("ana", self.n[0])
        self.favorites.add("ana", self.other)

        picks = self.engine.discover("ana", 10)
        assert self.seed not in picks
        assert self.n[0] not in picks
        assert picks == self.n[1:5] + [self.other_neighbor]
        assert self.engine.discover("ana", 2) == self.n[1:3]
        assert self.engine.discover("ana", 0) == []

    def test_radio_starts_with_seed(self):
        """Test that the radio starts with its seed."""
        queue = self.engine.radio(self.seed, 4)
        assert queue == [self.seed] + self.n[:3]

    def test_radio_edge_cases(self):
        """Test the radio with unknown seeds and small sizes."""
        assert self.engine.radio(None, 5) == []
        assert self.engine.radio(self.seed, 1) == [self.seed]
        assert self.engine.radio(make_track(99), 5) == [make_track(99)]

    def test_connect(self):
        """Test connecting two tracks through the graph."""
        path = self.engine.connect(self.n[0], self.n[1])
        assert path[0] == self.n[0]
        assert path[-1] == self.n[1]
        assert self.engine.connect(self.seed, self.other) == []


if __name__ == "__main__":
    import sys
    pytest.main([__file__, "-v"] + sys.argv[1:])
