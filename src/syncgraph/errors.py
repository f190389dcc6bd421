"""Exception types raised by SyncGraph services."""

from __future__ import annotations
from typing import Dict


class SyncGraphError(Exception):
    """Base class for SyncGraph errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return f"{self.__class__.__name__}: {self.message}"


class ConfigError(SyncGraphError):
    """Configuration file or environment could not be used."""


class NotFoundError(SyncGraphError):
    """A targeted operation referenced a record that does not exist."""


class TrackNotFoundError(NotFoundError):
    def __init__(self, track_id):
        super().__init__(f"Track {track_id} not found")
        self.track_id = track_id


class AccountNotFoundError(NotFoundError):
    def __init__(self, handle: str):
        super().__init__(f"Account '{handle}' not found")
        self.handle = handle


class SearchError(SyncGraphError):
    """One or more sub-queries of a multi-criteria search failed."""

    def __init__(self, failures: Dict[str, BaseException]):
        names = ", ".join(sorted(failures))
        super().__init__(f"Search sub-queries failed: {names}")
        self.failures = failures
