from .ids import new_handle_url, new_uuid, resolve_identifier
from .mime import (
    CACHED_VIDEO_MIME,
    FOLDER_MIME,
    VIDEO_EXTENSIONS,
    VIDEO_MIMES,
    NodeKind,
    classify,
    is_folder,
    is_video,
)
from .sorting import natural_key, natural_sorted
from .time import now_utc, normalize_dt, parse_rfc3339, to_rfc3339

__all__ = [
    "new_uuid",
    "new_handle_url",
    "resolve_identifier",
    "FOLDER_MIME",
    "VIDEO_MIMES",
    "VIDEO_EXTENSIONS",
    "CACHED_VIDEO_MIME",
    "NodeKind",
    "classify",
    "is_folder",
    "is_video",
    "natural_key",
    "natural_sorted",
    "now_utc",
    "parse_rfc3339",
    "to_rfc3339",
    "normalize_dt",
]
