"""
SyncGraph: prefix search, similarity traversal and social suggestions over a
music catalog, served from in-memory indexes kept in step with a record store.
"""

from syncgraph.models import Account, Role, Track

__version__ = "0.1"

__all__ = ["Account", "Role", "Track", "__version__"]
