"""Watch-progress records and the per-user envelope."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from driveplayer.util.time import parse_rfc3339, to_rfc3339


class WatchStatus(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


@dataclass(slots=True)
class VideoProgress:
    """Progress of one video for the envelope's user."""

    file_id: str
    file_name: str
    folder_id: str
    status: WatchStatus
    last_watched: datetime
    created_at: datetime
    completed_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "fileId": self.file_id,
            "fileName": self.file_name,
            "folderId": self.folder_id,
            "status": self.status.value,
            "lastWatched": to_rfc3339(self.last_watched),
            "createdAt": to_rfc3339(self.created_at),
        }
        if self.completed_at is not None:
            data["completedAt"] = to_rfc3339(self.completed_at)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VideoProgress:
        completed_at = data.get("completedAt")
        return cls(
            file_id=str(data["fileId"]),
            file_name=str(data.get("fileName", "")),
            folder_id=str(data.get("folderId", "")),
            status=WatchStatus(data["status"]),
            last_watched=parse_rfc3339(data["lastWatched"]),
            created_at=parse_rfc3339(data["createdAt"]),
            completed_at=parse_rfc3339(completed_at) if completed_at else None,
        )


@dataclass(slots=True)
class ProgressData:
    """Envelope persisted as one unit: all progress of one user."""

    user_id: str
    updated_at: datetime
    videos: dict[str, VideoProgress] = field(default_factory=dict)
    last_video_file_id: Optional[str] = None
    last_folder_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "userId": self.user_id,
            "videos": {fid: v.to_dict() for fid, v in self.videos.items()},
            "updatedAt": to_rfc3339(self.updated_at),
        }
        if self.last_video_file_id is not None:
            data["lastVideoFileId"] = self.last_video_file_id
        if self.last_folder_id is not None:
            data["lastFolderId"] = self.last_folder_id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProgressData:
        """Raises KeyError/ValueError/TypeError on malformed input."""
        videos_raw = data.get("videos") or {}
        if not isinstance(videos_raw, dict):
            raise TypeError("videos must be a mapping")
        return cls(
            user_id=str(data["userId"]),
            updated_at=parse_rfc3339(data["updatedAt"]),
            videos={str(fid): VideoProgress.from_dict(v) for fid, v in videos_raw.items()},
            last_video_file_id=data.get("lastVideoFileId"),
            last_folder_id=data.get("lastFolderId"),
        )
