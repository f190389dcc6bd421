"""
Audio availability checks.

The catalog only needs to know whether an audio reference still points at a
file. References under ``/audio/uploads/`` resolve against the upload
directory; any other absolute reference resolves against the static
directory (where the bundled default tracks live).
"""

from __future__ import annotations
from pathlib import Path
from typing import Optional, Protocol
from loguru import logger

UPLOAD_PREFIX = "/audio/uploads/"


class AudioLocator(Protocol):
    def exists(self, reference: Optional[str]) -> bool: ...


class LocalAudioStorage:
    """Filesystem-backed audio locator."""

    def __init__(self, upload_dir: str | Path = "uploads/audio",
                 static_dir: str | Path = "static"):
        self.upload_dir = Path(upload_dir).resolve()
        self.static_dir = Path(static_dir).resolve()
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Audio upload directory: {self.upload_dir}")

    def resolve(self, reference: Optional[str]) -> Optional[Path]:
        """Map a reference to a local path, or None if it cannot be mapped."""
        if not reference or not reference.strip():
            return None

        if reference.startswith(UPLOAD_PREFIX):
            base = self.upload_dir
            relative = reference[len(UPLOAD_PREFIX):]
        else:
            base = self.static_dir
            relative = reference.lstrip("/")

        candidate = (base / relative).resolve()
        # Reject references escaping their base directory
        if base != candidate and base not in candidate.parents:
            return None
        return candidate

    def exists(self, reference: Optional[str]) -> bool:
        path = self.resolve(reference)
        return path is not None and path.is_file()
