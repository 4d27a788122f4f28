"""Abstract base for playlist sources.

A source fetches the complete current playlist, every page of it, and
returns it as one Playlist snapshot in upstream listing order.
"""

from abc import ABC, abstractmethod

from playlistpulse.config import Settings
from playlistpulse.core.schemas import Playlist


class BasePlaylistSource(ABC):
    """Abstract base class for everything that can produce a live snapshot."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @abstractmethod
    async def fetch(self) -> Playlist:
        """Fetch the whole playlist.

        Failures propagate; a partial playlist is never returned.
        """
        ...

    def get_rate_limit(self) -> float:
        """Get the delay between page requests in seconds."""
        return self.settings.rate_limit_seconds
