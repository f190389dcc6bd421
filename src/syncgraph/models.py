"""
Catalog and account records shared by the in-memory engines.

Tracks are identified by ``track_id`` and accounts by ``handle``; the graphs,
the prefix index and the favorites lists all rely on that identity rather
than on field-by-field equality.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Any, Optional


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


@dataclass(eq=False)
class Track:
    """A catalog track. Equality and hashing use ``track_id`` only."""

    track_id: Optional[int]
    title: str
    artist: str
    genre: str
    year: int
    duration: int = 0
    audio_ref: Optional[str] = None

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Track):
            return NotImplemented
        return self.track_id == other.track_id

    def __hash__(self) -> int:
        return hash(("track", self.track_id))

    def copy(self) -> "Track":
        return Track(**asdict(self))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Track":
        return cls(
            track_id=data.get("track_id"),
            title=data.get("title") or "",
            artist=data.get("artist") or "",
            genre=data.get("genre") or "",
            year=int(data["year"]) if data.get("year") is not None else 0,
            duration=int(data.get("duration") or 0),
            audio_ref=data.get("audio_ref"),
        )


@dataclass(eq=False)
class Account:
    """A user account. Equality and hashing use ``handle`` only."""

    account_id: Optional[int]
    handle: str
    password_hash: Optional[str]
    display_name: str
    role: Role = Role.USER

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Account):
            return NotImplemented
        return self.handle == other.handle

    def __hash__(self) -> int:
        return hash(("account", self.handle))

    @property
    def has_credentials(self) -> bool:
        return bool(self.password_hash)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def to_dict(self, include_secret: bool = False) -> Dict[str, Any]:
        data = {
            "account_id": self.account_id,
            "handle": self.handle,
            "display_name": self.display_name,
            "role": self.role.value,
        }
        if include_secret:
            data["password_hash"] = self.password_hash
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        return cls(
            account_id=data.get("account_id"),
            handle=data["handle"],
            password_hash=data.get("password_hash"),
            display_name=data.get("display_name") or data["handle"],
            role=Role(data.get("role") or Role.USER.value),
        )
