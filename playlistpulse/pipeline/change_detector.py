"""Change detection between sync runs.

Compares the current playlist against the last stored snapshot and keeps
only videos worth reporting: videos that were not in the playlist before,
and videos that went from or to YouTube's "Deleted video" placeholder.
Other title edits are ignored, and removals are never reported.
"""

from typing import Dict, Optional

from playlistpulse.core.schemas import Playlist, Video

DELETED_TITLE = "Deleted video"

NEW = "new"
AVAILABILITY_CHANGED = "availability_changed"


def classify_change(previous: Optional[Video], current: Video) -> Optional[str]:
    """Classify one current video against its previous version, if any.

    Returns NEW, AVAILABILITY_CHANGED, or None for an unchanged video.
    """
    if previous is None:
        return NEW
    if previous.title != current.title and (
        previous.title == DELETED_TITLE or current.title == DELETED_TITLE
    ):
        return AVAILABILITY_CHANGED
    return None


def diff_playlists(previous: Playlist, current: Playlist) -> Playlist:
    """Build a diff snapshot of the videos in ``current`` that changed.

    Args:
        previous: Snapshot loaded from the last run.
        current: Snapshot fetched in this run.

    Returns:
        A new Playlist holding the changed videos in ``current`` order.
    """
    known: Dict[str, Video] = {video.video_id: video for video in previous.videos}

    changed = [
        video for video in current.videos
        if classify_change(known.get(video.video_id), video) is not None
    ]
    return Playlist(videos=changed)


def build_change_summary(previous: Playlist, current: Playlist, diff: Playlist) -> Dict[str, int]:
    """Summarize a diff into counts for logging."""
    known = {video.video_id: video for video in previous.videos}
    kinds = [classify_change(known.get(v.video_id), v) for v in diff.videos]
    return {
        "new_count": kinds.count(NEW),
        "availability_changed_count": kinds.count(AVAILABILITY_CHANGED),
        "previous_count": len(previous.videos),
        "current_count": len(current.videos),
        "size_changed": len(previous.videos) != len(current.videos),
    }
