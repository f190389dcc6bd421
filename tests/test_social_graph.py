"""
Tests for the social graph and friend suggestions.
"""

import pytest

from syncgraph.graph import social_graph
from syncgraph.graph.social_graph import SocialGraph
from syncgraph.models import Account


def make_account(handle):
    return Account(account_id=None, handle=handle, password_hash="hash", display_name=handle.title())


class TestSocialGraph:
    """Tests for SocialGraph."""

    def setup_method(self):
        self.graph = SocialGraph()
        self.ana, self.ben, self.cam, self.dee, self.eli = (
            make_account(h) for h in ("ana", "ben", "cam", "dee", "eli")
        )
        # ana - ben - cam - dee, ana - eli
        self.graph.connect(self.ana, self.ben)
        self.graph.connect(self.ben, self.cam)
        self.graph.connect(self.cam, self.dee)
        self.graph.connect(self.ana, self.eli)

    def test_connect_is_symmetric(self):
        """Test that connections go both ways."""
        assert self.graph.is_connected(self.ana, self.ben)
        assert self.graph.is_connected(self.ben, self.ana)
        assert self.ana in self.graph.connections(self.ben)

    def test_connect_ignores_self_and_none(self):
        """Test that self and missing accounts are ignored."""
        self.graph.connect(self.ana, self.ana)
        self.graph.connect(self.ana, None)
        assert not self.graph.is_connected(self.ana, self.ana)
        assert self.graph.degree(self.ana) == 2

    def test_connections_is_a_copy(self):
        """Test that listed connections can be modified freely."""
        friends = self.graph.connections(self.ana)
        friends.add(self.dee)
        assert self.dee not in self.graph.connections(self.ana)
        assert self.graph.connections(make_account("nobody")) == set()

    def test_disconnect_prunes_isolated_accounts(self):
        """Test that disconnect drops accounts left alone."""
        self.graph.disconnect(self.cam, self.dee)
        assert not self.graph.is_connected(self.cam, self.dee)
        assert self.dee not in self.graph.nodes()
        assert self.cam in self.graph.nodes()

    def test_suggest_depth_two(self):
        """Test suggestions two hops away."""
        assert self.graph.suggest(self.ana, 2, 10) == [self.cam]

    def test_suggest_depth_three(self):
        """Test suggestions three hops away."""
        assert self.graph.suggest(self.ana, 3, 10) == [self.cam, self.dee]
        assert self.graph.suggest(self.ana, 3, 1) == [self.cam]

    def test_suggest_never_returns_origin_or_direct(self):
        """Test that suggestions skip the origin and direct connections."""
        self.graph.connect(self.cam, self.ana)
        suggestions = self.graph.suggest(self.ana, 3, 10)
        assert self.ana not in suggestions
        assert self.cam not in suggestions
        assert suggestions == [self.dee]

    def test_suggest_siblings_of_a_friend(self):
        """Test suggesting the connections of a connection."""
        graph = SocialGraph()
        u1, u2, u3, u4 = (make_account(h) for h in ("u1", "u2", "u3", "u4"))
        graph.connect(u1, u2)
        graph.connect(u2, u3)
        graph.connect(u2, u4)

        suggestions = graph.suggest(u1, 2, 10)
        assert set(suggestions) == {u3, u4}
        assert graph.suggest(u1, 1, 10) == []

    def test_suggest_edge_cases(self):
        """Test suggestions for unknown accounts and zero depth."""
        assert self.graph.suggest(None, 2, 10) == []
        assert self.graph.suggest(self.ana, 0, 10) == []
        assert self.graph.suggest(self.ana, 1, 10) == []
        assert self.graph.suggest(make_account("nobody"), 2, 10) == []

    def test_module_suggest_tolerates_missing_graph(self):
        """Test the module-level suggest without a graph."""
        assert social_graph.suggest(None, self.ana) == []
        assert social_graph.suggest(self.graph, self.ana) == [self.cam]

    def test_reachable(self):
        """Test the accounts reachable from an origin."""
        assert self.graph.reachable(self.ana, 1) == {self.ben, self.eli}
        assert self.graph.reachable(self.ana, 3) == {self.ben, self.eli, self.cam, self.dee}
        assert self.graph.within_reach(self.ana, self.dee, 3)
        assert not self.graph.within_reach(self.ana, self.dee, 2)

    def test_clear(self):
        """Test clearing the graph."""
        self.graph.clear()
        assert self.graph.is_empty()


if __name__ == "__main__":
    import sys
    pytest.main([__file__, "-v"] + sys.argv[1:])
