"""Models for the offline video cache."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from driveplayer.util.mime import CACHED_VIDEO_MIME


@dataclass(frozen=True, slots=True)
class CachedVideoInfo:
    """Cache record without its content (listing view)."""

    file_id: str
    file_name: str
    downloaded_at: datetime
    size: int
    mime_type: str = CACHED_VIDEO_MIME
    last_accessed: Optional[datetime] = None

    @property
    def recency(self) -> datetime:
        """Timestamp used for LRU ordering."""
        return self.last_accessed or self.downloaded_at


@dataclass(frozen=True, slots=True)
class CachedVideo:
    """A fully downloaded video, keyed uniquely by file_id."""

    file_id: str
    file_name: str
    content: bytes
    downloaded_at: datetime
    mime_type: str = CACHED_VIDEO_MIME
    last_accessed: Optional[datetime] = None

    @property
    def size(self) -> int:
        return len(self.content)

    def info(self) -> CachedVideoInfo:
        return CachedVideoInfo(
            file_id=self.file_id,
            file_name=self.file_name,
            downloaded_at=self.downloaded_at,
            size=self.size,
            mime_type=self.mime_type,
            last_accessed=self.last_accessed,
        )


@dataclass(frozen=True, slots=True)
class PlaybackHandle:
    """
    Ephemeral, locally resolvable reference to cached content.

    The url is only meaningful to the HandleRegistry that issued it.
    """

    url: str
    file_id: str
    mime_type: str
    size: int
