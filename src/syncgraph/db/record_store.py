"""
Record store for tracks and accounts.

The in-memory engines only need a handful of operations from durable
storage (load everything, save, delete, a few finders). ``RecordStore`` is
that contract; ``SqlRecordStore`` implements it with SQLAlchemy Core so the
same code runs against SQLite (default) or Postgres.
"""

from __future__ import annotations
import contextlib
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

import sqlalchemy as sa
from sqlalchemy.engine import make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import StaticPool
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
from loguru import logger

from syncgraph.models import Account, Role, Track

DEFAULT_DB_URL = "sqlite:///data/syncgraph.db"

# Transient failures (locked SQLite file, dropped Postgres connection)
_retry_transient = retry(
    reraise=True,
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
    retry=retry_if_exception_type(OperationalError),
)


@runtime_checkable
class RecordStore(Protocol):
    """Operations the core needs from durable storage."""

    def load_all_tracks(self) -> List[Track]: ...

    def load_all_accounts(self) -> List[Account]: ...

    def save_track(self, track: Track) -> Track: ...

    def save_account(self, account: Account) -> Account: ...

    def delete_track(self, track_id: int) -> bool: ...

    def delete_account(self, handle: str) -> bool: ...

    def find_account_by_handle(self, handle: str) -> Optional[Account]: ...

    def find_track_by_id(self, track_id: int) -> Optional[Track]: ...

    def find_track_by_title_and_artist(self, title: str, artist: str) -> Optional[Track]: ...

    def find_tracks_by_artist(self, artist: str) -> List[Track]: ...

    def find_tracks_by_genre(self, genre: str) -> List[Track]: ...

    def find_tracks_by_year(self, year: int) -> List[Track]: ...

    def count_tracks(self) -> int: ...


metadata = sa.MetaData()

tracks_table = sa.Table(
    "tracks",
    metadata,
    sa.Column("track_id", sa.Integer, primary_key=True, autoincrement=True),
    sa.Column("title", sa.String(255), nullable=False),
    sa.Column("artist", sa.String(255), nullable=False),
    sa.Column("genre", sa.String(100), nullable=False),
    sa.Column("year", sa.Integer, nullable=False),
    sa.Column("duration", sa.Integer, nullable=False, default=0),
    sa.Column("audio_ref", sa.String(500)),
    sa.Index("idx_tracks_artist", "artist"),
    sa.Index("idx_tracks_genre", "genre"),
    sa.Index("idx_tracks_year", "year"),
)

accounts_table = sa.Table(
    "accounts",
    metadata,
    sa.Column("account_id", sa.Integer, primary_key=True, autoincrement=True),
    sa.Column("handle", sa.String(100), nullable=False, unique=True),
    sa.Column("password_hash", sa.String(255)),
    sa.Column("display_name", sa.String(255), nullable=False),
    sa.Column("role", sa.String(20), nullable=False, default=Role.USER.value),
)


def _row_to_track(row: Any) -> Track:
    return Track.from_dict(dict(row._mapping))


def _row_to_account(row: Any) -> Account:
    return Account.from_dict(dict(row._mapping))


class SqlRecordStore:
    """
    SQLAlchemy-backed record store.

    Stores:
    - Tracks (title, artist, genre, year, duration, audio reference)
    - Accounts (handle, credential hash, display name, role)
    """

    def __init__(self, url: str = DEFAULT_DB_URL, echo: bool = False):
        """
        Initialize the record store.

        Args:
            url: SQLAlchemy database URL
            echo: Log every SQL statement
        """
        self.url = url
        parsed = make_url(url)
        engine_args: Dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
        if parsed.get_backend_name() == "sqlite":
            engine_args["connect_args"] = {"check_same_thread": False}
            if parsed.database and parsed.database != ":memory:":
                Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
            else:
                # One shared connection, otherwise every checkout sees an empty database
                engine_args["poolclass"] = StaticPool

        self.engine = sa.create_engine(url, **engine_args)
        self._create_schema()

    def _create_schema(self):
        """Create the database schema (idempotent)."""
        metadata.create_all(self.engine)

    @contextlib.contextmanager
    def _transaction(self):
        """Context manager for database transactions."""
        with self.engine.begin() as conn:
            yield conn

    # --- tracks ---

    @_retry_transient
    def load_all_tracks(self) -> List[Track]:
        with self.engine.connect() as conn:
            rows = conn.execute(sa.select(tracks_table).order_by(tracks_table.c.track_id))
            return [_row_to_track(row) for row in rows]

    @_retry_transient
    def save_track(self, track: Track) -> Track:
        """
        Insert or update a track.

        Returns:
            A copy of the track carrying its assigned identifier
        """
        values = track.to_dict()
        track_id = values.pop("track_id")

        with self._transaction() as conn:
            if track_id is not None:
                result = conn.execute(
                    sa.update(tracks_table)
                    .where(tracks_table.c.track_id == track_id)
                    .values(**values)
                )
                if result.rowcount == 0:
                    conn.execute(sa.insert(tracks_table).values(track_id=track_id, **values))
            else:
                result = conn.execute(sa.insert(tracks_table).values(**values))
                track_id = result.inserted_primary_key[0]

        saved = track.copy()
        saved.track_id = track_id
        logger.debug(f"Saved track {track_id}: {track.title}")
        return saved

    @_retry_transient
    def delete_track(self, track_id: int) -> bool:
        with self._transaction() as conn:
            result = conn.execute(sa.delete(tracks_table).where(tracks_table.c.track_id == track_id))
        return result.rowcount > 0

    @_retry_transient
    def find_track_by_id(self, track_id: int) -> Optional[Track]:
        with self.engine.connect() as conn:
            row = conn.execute(
                sa.select(tracks_table).where(tracks_table.c.track_id == track_id)
            ).first()
        return _row_to_track(row) if row else None

    @_retry_transient
    def find_track_by_title_and_artist(self, title: str, artist: str) -> Optional[Track]:
        with self.engine.connect() as conn:
            row = conn.execute(
                sa.select(tracks_table).where(
                    tracks_table.c.title == title,
                    tracks_table.c.artist == artist,
                )
            ).first()
        return _row_to_track(row) if row else None

    def _find_tracks(self, clause) -> List[Track]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                sa.select(tracks_table).where(clause).order_by(tracks_table.c.track_id)
            )
            return [_row_to_track(row) for row in rows]

    @_retry_transient
    def find_tracks_by_artist(self, artist: str) -> List[Track]:
        return self._find_tracks(sa.func.lower(tracks_table.c.artist) == artist.lower())

    @_retry_transient
    def find_tracks_by_genre(self, genre: str) -> List[Track]:
        return self._find_tracks(sa.func.lower(tracks_table.c.genre) == genre.lower())

    @_retry_transient
    def find_tracks_by_year(self, year: int) -> List[Track]:
        return self._find_tracks(tracks_table.c.year == year)

    @_retry_transient
    def count_tracks(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(sa.select(sa.func.count()).select_from(tracks_table)).scalar_one()

    # --- accounts ---

    @_retry_transient
    def load_all_accounts(self) -> List[Account]:
        with self.engine.connect() as conn:
            rows = conn.execute(sa.select(accounts_table).order_by(accounts_table.c.account_id))
            return [_row_to_account(row) for row in rows]

    @_retry_transient
    def save_account(self, account: Account) -> Account:
        """Insert or update an account, keyed by handle."""
        values = {
            "handle": account.handle,
            "password_hash": account.password_hash,
            "display_name": account.display_name,
            "role": account.role.value,
        }

        with self._transaction() as conn:
            existing = conn.execute(
                sa.select(accounts_table.c.account_id)
                .where(accounts_table.c.handle == account.handle)
            ).first()
            if existing:
                account_id = existing[0]
                conn.execute(
                    sa.update(accounts_table)
                    .where(accounts_table.c.account_id == account_id)
                    .values(**values)
                )
            else:
                result = conn.execute(sa.insert(accounts_table).values(**values))
                account_id = result.inserted_primary_key[0]

        logger.debug(f"Saved account '{account.handle}'")
        return Account(
            account_id=account_id,
            handle=account.handle,
            password_hash=account.password_hash,
            display_name=account.display_name,
            role=account.role,
        )

    @_retry_transient
    def delete_account(self, handle: str) -> bool:
        with self._transaction() as conn:
            result = conn.execute(sa.delete(accounts_table).where(accounts_table.c.handle == handle))
        return result.rowcount > 0

    @_retry_transient
    def find_account_by_handle(self, handle: str) -> Optional[Account]:
        with self.engine.connect() as conn:
            row = conn.execute(
                sa.select(accounts_table).where(accounts_table.c.handle == handle)
            ).first()
        return _row_to_account(row) if row else None

    # --- housekeeping ---

    def get_store_stats(self) -> Dict[str, int]:
        """Get statistics about the store."""
        with self.engine.connect() as conn:
            return {
                "tracks": conn.execute(
                    sa.select(sa.func.count()).select_from(tracks_table)).scalar_one(),
                "accounts": conn.execute(
                    sa.select(sa.func.count()).select_from(accounts_table)).scalar_one(),
            }

    def close(self):
        """Release pooled connections."""
        self.engine.dispose()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
