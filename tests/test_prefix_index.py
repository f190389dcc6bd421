"""
Tests for the autocomplete prefix index.
"""

import threading
import pytest

from syncgraph.models import Track
from syncgraph.trie.prefix_index import PrefixIndex


def make_track(track_id, title, artist="Queen", genre="Rock", year=1975):
    return Track(track_id=track_id, title=title, artist=artist, genre=genre, year=year)


class TestPrefixIndex:
    """Tests for PrefixIndex."""

    def setup_method(self):
        self.index = PrefixIndex()
        self.bohemian = make_track(1, "Bohemian Rhapsody")
        self.bites = make_track(2, "Another One Bites the Dust")
        self.bowie = make_track(3, "Heroes", artist="David Bowie", year=1977)

        for track in (self.bohemian, self.bites, self.bowie):
            self.index.insert(track.title, track)
            self.index.insert(track.artist, track)

    def test_query_is_case_insensitive(self):
        """Test that queries ignore case and surrounding blanks."""
        assert self.index.query("BOH") == [self.bohemian]
        assert self.index.query("  boh ") == [self.bohemian]

    def test_query_collects_subtree(self):
        """Test that a short prefix collects every item below it."""
        results = self.index.query("q")
        assert set(results) == {self.bohemian, self.bites}

    def test_same_item_under_two_texts_is_returned_once(self):
        """Test that an item indexed twice is returned once."""
        self.index.insert("Bohemian Live", self.bohemian)
        assert self.index.query("bohemian") == [self.bohemian]

    def test_absent_or_blank_prefix(self):
        """Test unknown, empty and missing prefixes."""
        assert self.index.query("zzz") == []
        assert self.index.query("") == []
        assert self.index.query("   ") == []
        assert self.index.query(None) == []

    def test_blank_insert_is_ignored(self):
        """Test that blank texts are not indexed."""
        before = len(self.index)
        self.index.insert("   ", self.bohemian)
        self.index.insert(None, self.bohemian)
        assert len(self.index) == before

    def test_remove(self):
        """Test removing one text of an item."""
        assert self.index.remove("Bohemian Rhapsody", self.bohemian)
        assert self.index.query("boh") == []
        # Still indexed under the artist
        assert self.bohemian in self.index.query("queen")

    def test_remove_missing_path_is_noop(self):
        """Test removing texts or items that are not indexed."""
        assert not self.index.remove("Nothing here", self.bohemian)
        assert not self.index.remove("Heroes", self.bohemian)
        assert self.index.query("heroes") == [self.bowie]

    def test_remove_prunes_empty_branches(self):
        """Test that removal frees nodes no other text uses."""
        index = PrefixIndex()
        track = make_track(10, "Xanadu")
        index.insert("Xanadu", track)
        assert index.node_count() == 6

        index.remove("Xanadu", track)
        assert index.node_count() == 0
        assert index.is_empty()
        assert len(index) == 0

    def test_remove_keeps_shared_prefix(self):
        """Test that removal keeps nodes shared with another text."""
        index = PrefixIndex()
        a = make_track(10, "Star")
        b = make_track(11, "Starman")
        index.insert(a.title, a)
        index.insert(b.title, b)

        index.remove(b.title, b)
        assert index.query("star") == [a]
        assert index.node_count() == 4

    def test_equal_ids_collapse(self):
        """Test that items with the same id count as one."""
        copy = make_track(1, "Bohemian Rhapsody (Remaster)")
        self.index.insert(copy.title, copy)
        assert len(self.index.query("bohemian")) == 1

    def test_rebuild_replaces_contents(self):
        """Test rebuilding the index from entries."""
        fresh = make_track(20, "Yesterday", artist="The Beatles", year=1965)
        count = self.index.rebuild([(fresh.title, fresh), (fresh.artist, fresh)])

        assert count == 2
        assert self.index.query("boh") == []
        assert self.index.query("yes") == [fresh]
        assert self.index.query("the b") == [fresh]

    def test_clear(self):
        """Test clearing the index."""
        self.index.clear()
        assert self.index.is_empty()
        assert self.index.query("q") == []

    def test_concurrent_inserts(self):
        """Test inserting from several threads at once."""
        index = PrefixIndex()
        tracks = [make_track(i, f"Track {i}") for i in range(200)]

        def worker(chunk):
            for track in chunk:
                index.insert(track.title, track)

        threads = [threading.Thread(target=worker, args=(tracks[i::4],)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(index) == 200
        assert set(index.query("track")) == set(tracks)

    def test_queries_during_rebuild_see_whole_contents(self):
        """Test that queries see all of the old or all of the new entries while rebuilding."""
        index = PrefixIndex()
        many = [(f"Track a{i}", make_track(i, f"Track a{i}")) for i in range(200)]
        few = [(f"Track b{i}", make_track(1000 + i, f"Track b{i}")) for i in range(50)]
        index.rebuild(many)

        stop = threading.Event()
        seen = set()
        errors = []

        def reader():
            try:
                while True:
                    seen.add(len(index.query("track")))
                    if stop.is_set():
                        break
            except Exception as e:
                errors.append(e)

        readers = [threading.Thread(target=reader) for _ in range(3)]
        for t in readers:
            t.start()
        try:
            for i in range(10):
                index.rebuild(few if i % 2 == 0 else many)
        finally:
            stop.set()
            for t in readers:
                t.join()

        assert errors == []
        assert seen <= {200, 50}
        assert len(index) == 200


if __name__ == "__main__":
    import sys
    pytest.main([__file__, "-v"] + sys.argv[1:])
