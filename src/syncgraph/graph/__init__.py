"""
Graph module for SyncGraph.

This module provides the track similarity graph and the account social graph.
"""

from .similarity_graph import SimilarityGraph, similarity, SIMILARITY_THRESHOLD
from .social_graph import SocialGraph

__all__ = ["SimilarityGraph", "SocialGraph", "similarity", "SIMILARITY_THRESHOLD"]
