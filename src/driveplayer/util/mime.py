from __future__ import annotations

from enum import Enum

FOLDER_MIME: str = "application/vnd.google-apps.folder"

VIDEO_MIMES: frozenset[str] = frozenset(
    {
        "video/mp4",
        "video/mpeg",
        "video/quicktime",
        "video/x-msvideo",
        "video/x-matroska",
        "video/webm",
        "video/MP2T",
        "video/mp2t",
    }
)

VIDEO_EXTENSIONS: tuple[str, ...] = (
    ".mp4",
    ".avi",
    ".mov",
    ".mkv",
    ".webm",
    ".ts",
    ".m3u8",
)

# Container tag for downloaded content, whatever the source format.
CACHED_VIDEO_MIME: str = "video/mp4"


class NodeKind(str, Enum):
    """Closed classification of a Drive item."""

    FOLDER = "folder"
    VIDEO = "video"
    OTHER = "other"


def is_folder(mime_type: str) -> bool:
    return mime_type == FOLDER_MIME


def is_video(mime_type: str, name: str) -> bool:
    """True if the MIME type is a known video type or the name has a video extension."""
    if mime_type in VIDEO_MIMES:
        return True
    lowered = (name or "").lower()
    return any(lowered.endswith(ext) for ext in VIDEO_EXTENSIONS)


def classify(mime_type: str, name: str) -> NodeKind:
    """
    Classify a Drive item from its MIME type and name.

    The folder sentinel wins over name-based detection, so a folder named
    "lesson.mp4" is still a folder.
    """
    if is_folder(mime_type):
        return NodeKind.FOLDER
    if is_video(mime_type, name):
        return NodeKind.VIDEO
    return NodeKind.OTHER
