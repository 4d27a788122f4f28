"""YouTube playlist source.

Fetches every item of a playlist from the YouTube Data API v3
``playlistItems`` endpoint, following ``nextPageToken`` until the last
page, and maps each item's snippet onto a Video.
"""

import httpx
import logging
from typing import List, Optional

from pydantic import ValidationError

from playlistpulse.core.schemas import Playlist, Video
from playlistpulse.scraper.base_strategy import BasePlaylistSource
from playlistpulse.scraper.humanizer import Humanizer

logger = logging.getLogger(__name__)

PAGE_SIZE = 50  # API maximum for maxResults


def parse_playlist_item(item: dict) -> Optional[Video]:
    """Map one ``playlistItems`` resource onto a Video.

    Returns None for items without a video id. Raises ValueError when
    ``publishedAt`` is not an RFC 3339 timestamp.
    """
    snippet = item.get("snippet") or {}
    video_id = (snippet.get("resourceId") or {}).get("videoId", "")
    if not video_id:
        logger.warning("Skipping playlist item without a video id: %s", item.get("id"))
        return None

    try:
        return Video(
            title=snippet.get("title", ""),
            video_id=video_id,
            published_at=snippet.get("publishedAt"),
        )
    except ValidationError as e:
        raise ValueError(f"Bad publishedAt for video {video_id}: {e}") from e


class YouTubePlaylistSource(BasePlaylistSource):
    """Concrete source for a YouTube playlist."""

    def __init__(self, settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(settings)
        self.transport = transport

    def build_params(self, page_token: str) -> dict:
        params = {
            "part": "snippet",
            "maxResults": str(PAGE_SIZE),
            "playlistId": self.settings.playlist_id,
            "key": self.settings.api_key,
        }
        if page_token:
            params["pageToken"] = page_token
        return params

    async def fetch(self) -> Playlist:
        humanizer = Humanizer(base_delay=self.get_rate_limit())
        max_pages = self.settings.max_pages

        videos: List[Video] = []
        page_token = ""

        async with httpx.AsyncClient(timeout=30.0, transport=self.transport) as client:
            while True:
                await humanizer.delay()
                page = humanizer.request_count

                logger.info("Fetching playlist %s page %d", self.settings.playlist_id, page)
                response = await client.get(self.settings.base_url, params=self.build_params(page_token))
                response.raise_for_status()
                data = response.json()

                for item in data.get("items", []):
                    video = parse_playlist_item(item)
                    if video is not None:
                        videos.append(video)

                page_token = data.get("nextPageToken") or ""
                if not page_token:
                    break
                if max_pages and page >= max_pages:
                    raise RuntimeError(
                        f"Playlist {self.settings.playlist_id} has more than {max_pages} pages (maxPages)"
                    )

        logger.info("YouTube: fetched %d videos across %d pages", len(videos), humanizer.request_count)
        return Playlist(videos=videos)
