"""
Catalog metrics and favorites export built on pandas.

- genre_counts / top_artists: aggregate views for the admin dashboard
- export_favorites_csv: a favorites list as UTF-8 CSV bytes
"""

from __future__ import annotations
from typing import Dict, Iterable
import pandas as pd
from loguru import logger

from syncgraph.models import Track

CSV_COLUMNS = ["ID", "Título", "Artista", "Género", "Año", "Duración (seg)"]


def tracks_frame(tracks: Iterable[Track]) -> pd.DataFrame:
    """One row per track, columns named after the Track fields."""
    rows = [t.to_dict() for t in tracks if t is not None]
    return pd.DataFrame(
        rows,
        columns=["track_id", "title", "artist", "genre", "year", "duration", "audio_ref"],
    )


def _counts(df: pd.DataFrame, column: str) -> pd.DataFrame:
    counts = df.groupby(column).size().reset_index(name="tracks")
    # Most frequent first, ties alphabetical
    return counts.sort_values(["tracks", column], ascending=[False, True])


def genre_counts(tracks: Iterable[Track]) -> Dict[str, int]:
    """Number of tracks per genre, most frequent first."""
    df = tracks_frame(tracks)
    if df.empty:
        return {}
    counts = _counts(df, "genre")
    return {row.genre: int(row.tracks) for row in counts.itertuples(index=False)}


def top_artists(tracks: Iterable[Track], top: int = 10) -> Dict[str, int]:
    """
    Artists with the most tracks.

    Args:
        tracks: Catalog tracks
        top: Maximum number of artists to return

    Returns:
        Ordered mapping artist -> track count
    """
    df = tracks_frame(tracks)
    if df.empty or top <= 0:
        return {}
    counts = _counts(df, "artist").head(top)
    return {row.artist: int(row.tracks) for row in counts.itertuples(index=False)}


def export_favorites_csv(tracks: Iterable[Track]) -> bytes:
    """
    Serialize a favorites list to CSV.

    Fields containing commas, quotes or newlines are quoted, with embedded
    quotes doubled. An empty list yields the header row only.
    """
    tracks = [t for t in (tracks or []) if t is not None]
    df = pd.DataFrame(
        [[t.track_id, t.title, t.artist, t.genre, t.year, t.duration] for t in tracks],
        columns=CSV_COLUMNS,
    )
    csv = df.to_csv(index=False, lineterminator="\n")
    logger.debug(f"Exported {len(tracks)} favorites to CSV")
    return csv.encode("utf-8")
