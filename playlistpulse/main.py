"""PlaylistPulse: track what changed in a YouTube playlist since the last run.

Meant for cron / scheduled CI: fetch the playlist, compare it with the
stored snapshot, write playlist and diff documents (archiving the old ones
when history is kept), then exit.
"""

import asyncio
import logging
import sys
from typing import Optional

from playlistpulse.config import Settings, load_settings
from playlistpulse.pipeline.history import HistoryManager, SyncReport
from playlistpulse.scraper.base_strategy import BasePlaylistSource
from playlistpulse.scraper.youtube_strategy import YouTubePlaylistSource
from playlistpulse.storage.json_store import JsonPlaylistStore

logger = logging.getLogger("playlistpulse")


async def run_sync(
    settings: Settings,
    source: Optional[BasePlaylistSource] = None,
    store: Optional[JsonPlaylistStore] = None,
) -> SyncReport:
    """Fetch the playlist and reconcile it with the stored snapshot."""
    source = source or YouTubePlaylistSource(settings)
    store = store or JsonPlaylistStore(settings.dir_path)
    manager = HistoryManager(store, settings)

    current = await source.fetch()
    logger.info("Fetched %d videos from playlist %s", len(current.videos), settings.playlist_id)

    return manager.sync(current)


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        settings = load_settings()
        report = asyncio.run(run_sync(settings))
    except Exception as e:
        logger.error("Sync failed: %s", e, exc_info=True)
        sys.exit(1)

    logger.info(
        "Sync complete: action=%s written=%s archived=%s",
        report.action.value, report.written, report.archived,
    )
    if report.archive_errors:
        logger.warning("History archiving had %d error(s): %s", len(report.archive_errors), report.archive_errors)


if __name__ == "__main__":
    main()
