"""
Persistence module for SyncGraph.

This module defines the record store contract and its SQLAlchemy implementation.
"""

from .record_store import RecordStore, SqlRecordStore

__all__ = ["RecordStore", "SqlRecordStore"]
