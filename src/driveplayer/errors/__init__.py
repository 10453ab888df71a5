"""Public error exports for driveplayer."""

from __future__ import annotations

from .exceptions import (
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

__all__ = [
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
