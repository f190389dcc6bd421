"""
Cache module for SyncGraph.

This module provides the in-memory identity index of accounts, kept in step
with the record store through read-repair.
"""

from .identity_index import IdentityIndex

__all__ = ["IdentityIndex"]
