"""Exception hierarchy and HTTP error mapping for driveplayer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class DrivePlayerError(Exception):
    """
    Base exception for driveplayer.

    Attributes:
        details: Optional structured information (e.g., HTTP status, reason).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class InvalidInputError(DrivePlayerError):
    """Raised for malformed folder references, empty fields or HTTP 400."""


class UnauthorizedError(DrivePlayerError):
    """Raised when the token is missing/expired or OAuth fails (HTTP 401)."""


class PermissionDeniedError(UnauthorizedError):
    """Raised when access is denied (HTTP 403 non-quota)."""


class NotFoundError(DrivePlayerError):
    """Raised when a Drive resource is not found (HTTP 404)."""


class TransientError(DrivePlayerError):
    """Base for failures that may succeed on a later attempt."""


class RateLimitError(TransientError):
    """Raised when rate-limited (HTTP 429, or 403 with a quota reason)."""


class NetworkError(TransientError):
    """Raised when network/timeout issues prevent the request."""


class ApiError(TransientError):
    """Raised for unclassified API errors (5xx, unknown 4xx, etc.)."""


class StorageError(DrivePlayerError):
    """Raised when a local persistence operation fails."""


class InvalidStateError(DrivePlayerError):
    """Raised when an object is used in an invalid state (e.g., player closed)."""


class TreeCycleError(InvalidStateError):
    """Raised when a folder appears among its own ancestors."""


class TreeDepthError(InvalidStateError):
    """Raised when folder expansion goes deeper than the configured limit."""


class DownloadCancelledError(DrivePlayerError):
    """Raised when a download is aborted through its cancel event."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to driveplayer exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_STATUS_ERRORS: dict[int, type[DrivePlayerError]] = {
    400: InvalidInputError,
    401: UnauthorizedError,
    404: NotFoundError,
    429: RateLimitError,
}

# Drive reports exhausted quotas as 403 with one of these reasons.
_QUOTA_REASONS: tuple[str, ...] = (
    "quota",
    "ratelimitexceeded",
    "dailylimitexceeded",
    "usagelimits",
)


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> DrivePlayerError:
    """
    Translate a failed Drive response into a driveplayer exception.

    Policy:
        - 400 -> InvalidInputError
        - 401 -> UnauthorizedError
        - 403 -> RateLimitError for quota reasons, else PermissionDeniedError
        - 404 -> NotFoundError
        - 429 -> RateLimitError
        - anything else -> ApiError (retried by the controller when 5xx)
    """
    details: dict[str, Any] = {"status_code": info.status_code, "reason": info.reason}
    details.update(info.details or {})
    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 403:
        error_cls: type[DrivePlayerError] = (
            RateLimitError if _is_quota_reason(info.reason) else PermissionDeniedError
        )
    else:
        error_cls = _STATUS_ERRORS.get(info.status_code, ApiError)
    return error_cls(message, details=details, cause=cause)


def _is_quota_reason(reason: Optional[str]) -> bool:
    lowered = (reason or "").lower()
    return any(key in lowered for key in _QUOTA_REASONS)
