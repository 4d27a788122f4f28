"""Pydantic models for playlist snapshots and their JSON documents."""

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def rfc3339(dt: datetime) -> str:
    """Format a timestamp as RFC 3339 with second precision ("Z" for UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    text = dt.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


class Video(BaseModel):
    """One playlist member as stored in playlist and diff documents."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    video_id: str = Field(alias="videoId", min_length=1)
    published_at: datetime = Field(alias="publishedAt")


class Playlist(BaseModel):
    """A timestamped, ordered snapshot of the whole playlist.

    ``updated_at`` is stamped when the snapshot is built, so a diff carries
    the time the comparison ran rather than when anything changed upstream.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    videos: List[Video] = []
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")

    @field_validator("videos", mode="before")
    @classmethod
    def _null_videos(cls, value):
        # Documents written by older runs store an empty diff as null
        return [] if value is None else value

    def is_empty(self) -> bool:
        return not self.videos

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)

    @classmethod
    def from_json(cls, data) -> "Playlist":
        return cls.model_validate_json(data)
