"""Snapshot history: decide what to persist after a fetch, and do it.

The decision (``reconcile``) is pure. ``HistoryManager`` wraps it with the
store: it loads the previous playlist and diff, archives them under
timestamped names when history is kept, and then overwrites the live
documents. Archiving always finishes before anything is overwritten.
"""

import logging
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel

from playlistpulse.config import Settings
from playlistpulse.core.schemas import Playlist, rfc3339
from playlistpulse.pipeline.change_detector import build_change_summary, diff_playlists
from playlistpulse.storage.json_store import JsonPlaylistStore, StoreError

logger = logging.getLogger(__name__)


class Action(str, Enum):
    INITIALIZE = "initialize"
    NOOP = "noop"
    REPLACE_PLAYLIST_ONLY = "replace_playlist_only"
    REPLACE_PLAYLIST_AND_DIFF = "replace_playlist_and_diff"


class Reconciliation(BaseModel):
    """What a sync run should write."""
    action: Action
    diff: Optional[Playlist] = None
    archive: bool = False


class ArchiveOutcome(BaseModel):
    archived: List[str] = []
    errors: List[str] = []


class SyncReport(BaseModel):
    """Result of a sync run, for the caller to log."""
    action: Action
    diff: Optional[Playlist] = None
    written: List[str] = []
    archived: List[str] = []
    archive_errors: List[str] = []


def reconcile(
    current: Playlist,
    previous_playlist: Optional[Playlist],
    previous_diff: Optional[Playlist],
    keep_history: bool,
) -> Reconciliation:
    """Decide which documents to replace.

    Args:
        current: Snapshot fetched in this run.
        previous_playlist: Last stored snapshot, or None if none could be loaded.
        previous_diff: Last stored diff, or None. It only matters to archiving.
        keep_history: Whether replaced documents are archived first.

    Returns:
        A Reconciliation. No previous playlist means INITIALIZE, which skips
        diffing and archiving. An empty diff with a changed size still
        replaces the playlist, because removals never show up in a diff.
    """
    if previous_playlist is None:
        return Reconciliation(action=Action.INITIALIZE)

    diff = diff_playlists(previous_playlist, current)

    if diff.is_empty():
        if len(current.videos) != len(previous_playlist.videos):
            return Reconciliation(action=Action.REPLACE_PLAYLIST_ONLY, diff=diff, archive=keep_history)
        return Reconciliation(action=Action.NOOP, diff=diff)

    return Reconciliation(action=Action.REPLACE_PLAYLIST_AND_DIFF, diff=diff, archive=keep_history)


def archive_name(playlist: Playlist, base_name: str) -> str:
    """Archive file name for a document, keyed by its own timestamp."""
    return f"{rfc3339(playlist.updated_at)}_{base_name}"


class HistoryManager:
    """Applies reconciliation decisions to a playlist store."""

    def __init__(self, store: JsonPlaylistStore, settings: Settings):
        self.store = store
        self.settings = settings

    def load_previous(self) -> Tuple[Optional[Playlist], Optional[Playlist]]:
        """Load the previous playlist and diff; either may be None."""
        previous_playlist = previous_diff = None

        try:
            previous_playlist = self.store.load(self.settings.playlist_file_name)
        except StoreError as e:
            logger.warning("No previous playlist (%s); a new playlist will be created", e)

        if not self.store.exists(self.settings.diff_file_name):
            logger.info("No previous diff")
            return previous_playlist, previous_diff

        try:
            previous_diff = self.store.load(self.settings.diff_file_name)
        except StoreError as e:
            logger.warning("Ignoring unreadable previous diff (%s)", e)

        return previous_playlist, previous_diff

    def archive(self, previous_playlist: Playlist, previous_diff: Optional[Playlist]) -> ArchiveOutcome:
        """Copy the live playlist and diff documents to timestamped names.

        The stored files are copied as they are; the loaded snapshots only
        supply the timestamp for the archive name. Each step is best-effort:
        a failure is logged and recorded, and the remaining steps still run.
        The live diff is removed only once its archive copy exists.
        """
        outcome = ArchiveOutcome()

        name = archive_name(previous_playlist, self.settings.playlist_file_name)
        try:
            self.store.copy(self.settings.playlist_file_name, name)
            outcome.archived.append(name)
        except StoreError as e:
            logger.warning("Could not archive previous playlist: %s", e)
            outcome.errors.append(str(e))

        if previous_diff is None or previous_diff.is_empty():
            return outcome

        name = archive_name(previous_diff, self.settings.diff_file_name)
        try:
            self.store.copy(self.settings.diff_file_name, name)
            outcome.archived.append(name)
        except StoreError as e:
            logger.warning("Could not archive previous diff: %s", e)
            outcome.errors.append(str(e))
            return outcome

        try:
            self.store.delete(self.settings.diff_file_name)
        except StoreError as e:
            logger.warning("Could not remove archived diff: %s", e)
            outcome.errors.append(str(e))

        return outcome

    def apply(
        self,
        current: Playlist,
        reconciliation: Reconciliation,
        previous_playlist: Optional[Playlist],
        previous_diff: Optional[Playlist],
    ) -> SyncReport:
        """Carry out a reconciliation. Primary write failures raise StoreError."""
        action = reconciliation.action
        report = SyncReport(action=action, diff=reconciliation.diff)

        if action is Action.NOOP:
            logger.info("No diff and no size change, nothing to do")
            return report

        if action is Action.INITIALIZE:
            self.store.save(self.settings.playlist_file_name, current)
            report.written.append(self.settings.playlist_file_name)
            return report

        if reconciliation.archive:
            outcome = self.archive(previous_playlist, previous_diff)
            report.archived.extend(outcome.archived)
            report.archive_errors.extend(outcome.errors)

        self.store.save(self.settings.playlist_file_name, current)
        report.written.append(self.settings.playlist_file_name)

        if action is Action.REPLACE_PLAYLIST_AND_DIFF:
            self.store.save(self.settings.diff_file_name, reconciliation.diff)
            report.written.append(self.settings.diff_file_name)
        else:
            logger.warning(
                "Playlist size changed from %d to %d with no diff entries; replaced playlist only",
                len(previous_playlist.videos), len(current.videos),
            )

        return report

    def sync(self, current: Playlist) -> SyncReport:
        previous_playlist, previous_diff = self.load_previous()
        reconciliation = reconcile(current, previous_playlist, previous_diff, self.settings.keep_history)
        if reconciliation.diff is not None:
            logger.info("Changes: %s", build_change_summary(previous_playlist, current, reconciliation.diff))
        logger.info("Reconciliation: %s", reconciliation.action.value)
        return self.apply(current, reconciliation, previous_playlist, previous_diff)
