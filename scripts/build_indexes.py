#!/usr/bin/env python
"""
Load the catalog and accounts from the record store and build the in-memory
indexes (prefix index, similarity graph, identity index).

Usage:
    # Build from configs/config.yaml
    python scripts/build_indexes.py

    # Against another database, with a sample of similar tracks and a radio
    SYNCGRAPH_DB_URL="sqlite:///data/other.db" TRACK_ID=42 python scripts/build_indexes.py

    # Try the autocomplete
    PREFIX="que" python scripts/build_indexes.py
"""

from __future__ import annotations
import os
import sys
from loguru import logger

from syncgraph.app import SyncGraph
from syncgraph.config import configure_logging, load_settings
from syncgraph.errors import ConfigError, TrackNotFoundError


def main():
    """Main entry point for building the indexes."""
    try:
        settings = load_settings()
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)
    configure_logging(settings.log_level, settings.log_file)

    track_id = os.getenv("TRACK_ID")
    prefix = os.getenv("PREFIX")

    logger.info("=" * 60)
    logger.info("🎵 Building SyncGraph Indexes")
    logger.info("=" * 60)
    logger.info(f"Database: {settings.db_url}")
    logger.info(f"Audio uploads: {settings.audio_upload_dir}")
    logger.info("=" * 60)

    with SyncGraph.from_settings(settings) as app:
        stats = app.bootstrap()

        logger.success("✅ Indexes built!")
        logger.info(f"  • Tracks: {stats['tracks']}")
        logger.info(f"  • Default audio assigned: {stats['audio_assigned']}")
        logger.info(f"  • Removed without audio: {stats['audio_removed']}")
        logger.info(f"  • Prefix entries: {stats['index_entries']}")
        logger.info(f"  • Similarity edges: {stats['edges']}")
        logger.info(f"  • Accounts: {stats['accounts']}")
        logger.info(f"  • Accounts repaired: {stats['identity_repaired']}")

        graph_stats = app.similarity_graph.get_graph_stats()
        logger.info("\n🕸️  Similarity Graph:")
        logger.info(f"  • Density: {graph_stats['density']:.4f}")
        logger.info(f"  • Average degree: {graph_stats['avg_degree']:.2f}")
        logger.info(f"  • Connected components: {graph_stats['connected_components']}")

        genres = app.genre_metrics()
        if genres:
            logger.info("\n📊 Genres:")
            for genre, count in list(genres.items())[:10]:
                logger.info(f"  • {genre}: {count}")

        if prefix:
            logger.info(f"\n🔎 Autocomplete '{prefix}':")
            for track in app.catalog.autocomplete(prefix)[:10]:
                logger.info(f"  • {track.title} by {track.artist}")

        if track_id:
            try:
                seed = app.catalog.require_track(int(track_id))
            except (TrackNotFoundError, ValueError) as e:
                logger.error(f"Cannot use TRACK_ID={track_id}: {e}")
                sys.exit(1)

            logger.info(f"\n🔗 Similar to '{seed.title}':")
            for i, track in enumerate(app.catalog.similar_tracks(seed.track_id, 5), 1):
                weight = app.similarity_graph.weight(seed, track)
                logger.info(f"  {i}. {track.title} by {track.artist} (weight {weight:.2f})")

            logger.info(f"\n📻 Radio from '{seed.title}':")
            for i, track in enumerate(app.radio(seed.track_id, 10), 1):
                logger.info(f"  {i}. {track.title} by {track.artist}")

    logger.info("\n" + "=" * 60)
    logger.info("✨ Index Build Complete!")
    logger.info("=" * 60)


if __name__ == "__main__":
    main()
