"""driveplayer public API."""

from __future__ import annotations

from driveplayer.auth import AuthInfo, OAuthClient, Session, SessionClaims
from driveplayer.cache import HandleRegistry, VideoCache
from driveplayer.config import Settings
from driveplayer.errors import (
    ApiError,
    DownloadCancelledError,
    DrivePlayerError,
    HttpErrorInfo,
    InvalidInputError,
    InvalidStateError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    StorageError,
    TransientError,
    TreeCycleError,
    TreeDepthError,
    UnauthorizedError,
    map_http_error,
)
from driveplayer.manager import DrivePlayerManager
from driveplayer.models import (
    CachedVideo,
    CachedVideoInfo,
    DriveNode,
    NodeKind,
    PlaybackHandle,
    ProgressData,
    VideoProgress,
    WatchStatus,
)
from driveplayer.player import PlaybackController, PlaybackState
from driveplayer.progress import ProgressStore
from driveplayer.store import (
    DirectoryBlobStore,
    InMemoryBlobStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
)
from driveplayer.sync import FolderTreeSynchronizer
from driveplayer.util import classify, natural_key, resolve_identifier

__all__ = [
    # High-level
    "DrivePlayerManager",
    "Settings",
    # Auth
    "AuthInfo",
    "OAuthClient",
    "Session",
    "SessionClaims",
    # Core components
    "FolderTreeSynchronizer",
    "VideoCache",
    "HandleRegistry",
    "ProgressStore",
    "PlaybackController",
    "PlaybackState",
    "resolve_identifier",
    "classify",
    "natural_key",
    # Storage
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "InMemoryBlobStore",
    "DirectoryBlobStore",
    # Models
    "DriveNode",
    "NodeKind",
    "CachedVideo",
    "CachedVideoInfo",
    "PlaybackHandle",
    "WatchStatus",
    "VideoProgress",
    "ProgressData",
    # Errors
    "DrivePlayerError",
    "InvalidInputError",
    "UnauthorizedError",
    "PermissionDeniedError",
    "NotFoundError",
    "TransientError",
    "RateLimitError",
    "NetworkError",
    "ApiError",
    "StorageError",
    "InvalidStateError",
    "TreeCycleError",
    "TreeDepthError",
    "DownloadCancelledError",
    "HttpErrorInfo",
    "map_http_error",
]
