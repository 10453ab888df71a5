"""Public model exports for driveplayer."""

from __future__ import annotations

from driveplayer.util.mime import NodeKind

from .cached_video import CachedVideo, CachedVideoInfo, PlaybackHandle
from .drive_node import DriveNode
from .file_info import FileInfo
from .progress import ProgressData, VideoProgress, WatchStatus

__all__ = [
    "FileInfo",
    "NodeKind",
    "DriveNode",
    "CachedVideo",
    "CachedVideoInfo",
    "PlaybackHandle",
    "WatchStatus",
    "VideoProgress",
    "ProgressData",
]
