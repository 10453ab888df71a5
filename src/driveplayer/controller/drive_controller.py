"""Google Drive API controller (internal use only)."""

from __future__ import annotations

import io
import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterator, Optional, TypeVar

from driveplayer.auth.oauth_client import build_drive_service
from driveplayer.errors import (
    ApiError,
    HttpErrorInfo,
    InvalidInputError,
    NetworkError,
    RateLimitError,
    UnauthorizedError,
    map_http_error,
)
from driveplayer.models import FileInfo
from driveplayer.util.time import parse_rfc3339

from .fields import FILE_FIELDS, LIST_FIELDS, LIST_ORDER_BY, LIST_PAGE_SIZE

if TYPE_CHECKING:
    from driveplayer.auth import Session
    from driveplayer.config import Settings

T = TypeVar("T")

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8 * 1024 * 1024


@dataclass(frozen=True)
class _RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 1.0


@dataclass(frozen=True, slots=True)
class MediaChunk:
    """One piece of a streamed download."""

    data: bytes
    total_size: Optional[int]


class GoogleDriveController:
    """
    Read-only Drive API controller (internal only).

    Notes:
        - The Drive `service` object is NOT exposed.
        - Each thread lazily gets its own service from the factory, so the
          tree synchronizer may list folders from a worker pool.
        - Failed requests are retried with exponential backoff on 429, 5xx
          and network errors.
    """

    def __init__(self, session: Session, *, settings: Optional[Settings] = None) -> None:
        if not session.access_token:
            raise UnauthorizedError("Session has no access token")

        timeout = settings.request_timeout if settings else 60.0
        credentials = session.google_credentials()

        def factory() -> Any:
            return build_drive_service(credentials, timeout=timeout)

        self._init_state(
            factory,
            retry_policy=_policy_from(settings),
            chunk_size=settings.chunk_size if settings else DEFAULT_CHUNK_SIZE,
        )

    @classmethod
    def from_service(
        cls,
        service: Any,
        *,
        max_retries: int = 3,
        initial_delay_sec: float = 1.0,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> GoogleDriveController:
        """Create controller from a pre-built Drive service (useful for tests)."""
        obj = cls.__new__(cls)
        obj._init_state(
            lambda: service,
            retry_policy=_RetryPolicy(max_retries, initial_delay_sec),
            chunk_size=chunk_size,
        )
        return obj

    def _init_state(
        self,
        factory: Callable[[], Any],
        *,
        retry_policy: _RetryPolicy,
        chunk_size: int,
    ) -> None:
        self._service_factory = factory
        self._local = threading.local()
        self._retry_policy = retry_policy
        self._chunk_size = chunk_size

    # ----------------------------
    # Public API
    # ----------------------------
    def get(self, file_id: str) -> FileInfo:
        _require_id(file_id)
        req = self._service.files().get(
            fileId=file_id,
            fields=FILE_FIELDS,
            supportsAllDrives=True,
        )
        data = self._execute(req.execute)
        return _file_dict_to_file_info(data)

    def list_children(self, folder_id: str) -> list[FileInfo]:
        """
        List non-trashed children of folder_id (single page).

        Returns:
            Items in Drive's "folder,name" order. Incomplete items (missing
            id/name/mimeType) are dropped.
        """
        _require_id(folder_id)
        req = self._service.files().list(
            q=_build_parent_query(folder_id),
            fields=LIST_FIELDS,
            orderBy=LIST_ORDER_BY,
            pageSize=LIST_PAGE_SIZE,
            supportsAllDrives=True,
            includeItemsFromAllDrives=True,
        )
        data = self._execute(req.execute)

        if data.get("nextPageToken"):
            logger.warning(
                "Folder %s has more than %d children; the rest are not listed",
                folder_id,
                LIST_PAGE_SIZE,
            )

        infos = [_file_dict_to_file_info(f) for f in data.get("files", []) or []]
        return [info for info in infos if info.is_complete()]

    def iter_media(self, file_id: str) -> Iterator[MediaChunk]:
        """
        Stream the raw bytes of file_id chunk by chunk.

        Each yielded chunk carries the total size when Drive reports it.
        """
        _require_id(file_id)
        try:
            from googleapiclient.http import MediaIoBaseDownload
        except Exception as exc:  # pragma: no cover
            raise UnauthorizedError(
                "google-api-python-client is not available",
                cause=exc,
            ) from exc

        req = self._service.files().get_media(fileId=file_id, supportsAllDrives=True)
        buffer = io.BytesIO()
        downloader = MediaIoBaseDownload(buffer, req, chunksize=self._chunk_size)

        done = False
        while not done:
            status, done = self._execute(downloader.next_chunk)
            data = buffer.getvalue()
            buffer.seek(0)
            buffer.truncate(0)
            total = getattr(status, "total_size", None) if status is not None else None
            yield MediaChunk(data=data, total_size=total if isinstance(total, int) else None)

    # ----------------------------
    # Internals
    # ----------------------------
    @property
    def _service(self) -> Any:
        service = getattr(self._local, "service", None)
        if service is None:
            service = self._service_factory()
            self._local.service = service
        return service

    def _execute(self, func: Callable[[], T]) -> T:
        delay = self._retry_policy.initial_delay_sec
        for attempt in range(self._retry_policy.max_retries + 1):
            try:
                return func()
            except Exception as exc:
                mapped = self._map_exception(exc)
                if self._should_retry(mapped) and attempt < self._retry_policy.max_retries:
                    logger.info("Retrying Drive request after %s (attempt %d)", mapped, attempt + 1)
                    time.sleep(delay)
                    delay *= 2
                    continue
                raise mapped from exc

        raise ApiError("Unexpected retry loop termination")

    def _should_retry(self, exc: Exception) -> bool:
        if isinstance(exc, RateLimitError):
            return True
        if isinstance(exc, NetworkError):
            return True
        if isinstance(exc, ApiError):
            status_code = getattr(exc, "details", {}).get("status_code")
            return isinstance(status_code, int) and 500 <= status_code <= 599
        return False

    def _map_exception(self, exc: Exception) -> Exception:
        try:
            from googleapiclient.errors import HttpError
        except Exception:  # pragma: no cover
            HttpError = None  # type: ignore[assignment]

        if HttpError is not None and isinstance(exc, HttpError):
            info = _http_error_to_info(exc)
            return map_http_error(info, cause=exc)

        if isinstance(exc, (OSError, TimeoutError)):
            return NetworkError("Network error", cause=exc)

        if _is_transport_error(exc):
            return NetworkError("Network error", cause=exc)

        return ApiError("Drive API error", cause=exc)


def _policy_from(settings: Optional[Settings]) -> _RetryPolicy:
    if settings is None:
        return _RetryPolicy()
    return _RetryPolicy(settings.max_retries, settings.retry_delay)


def _require_id(file_id: str) -> None:
    if not isinstance(file_id, str) or not file_id.strip():
        raise InvalidInputError("file_id must be a non-empty string")


def _is_transport_error(exc: Exception) -> bool:
    try:
        import httplib2
    except Exception:  # pragma: no cover
        return False
    return isinstance(exc, httplib2.HttpLib2Error)


def _build_parent_query(parent_id: str) -> str:
    escaped = parent_id.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}' in parents and trashed=false"


def _file_dict_to_file_info(data: dict[str, Any]) -> FileInfo:
    file_id = data.get("id")
    name = data.get("name", "")
    mime_type = data.get("mimeType", "")
    parents = data.get("parents", []) or []
    trashed = bool(data.get("trashed", False))

    modified_time = None
    if isinstance(data.get("modifiedTime"), str):
        try:
            modified_time = parse_rfc3339(data["modifiedTime"])
        except ValueError:
            modified_time = None

    size = None
    if isinstance(data.get("size"), str) and data["size"].isdigit():
        size = int(data["size"])
    elif isinstance(data.get("size"), int):
        size = data["size"]

    return FileInfo(
        file_id=file_id if isinstance(file_id, str) else "",
        name=name if isinstance(name, str) else "",
        mime_type=mime_type if isinstance(mime_type, str) else "",
        parents=list(parents) if isinstance(parents, list) else [],
        trashed=trashed,
        modified_time=modified_time,
        size=size,
        web_view_link=_opt_str(data.get("webViewLink")),
        web_content_link=_opt_str(data.get("webContentLink")),
        thumbnail_link=_opt_str(data.get("thumbnailLink")),
    )


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _http_error_to_info(exc: Any) -> HttpErrorInfo:
    status_code = getattr(getattr(exc, "resp", None), "status", None)
    reason = getattr(getattr(exc, "resp", None), "reason", None)

    message = None
    details: dict[str, Any] = {}

    content = getattr(exc, "content", None)
    if isinstance(content, (bytes, bytearray)):
        try:
            payload = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            payload = None
        if isinstance(payload, dict):
            err = payload.get("error", {})
            if isinstance(err, dict):
                message = err.get("message") or None
                errors = err.get("errors") or []
                if errors and isinstance(errors, list) and isinstance(errors[0], dict):
                    details["domain"] = errors[0].get("domain")
                    details["reason_detail"] = errors[0].get("reason")
                    if isinstance(errors[0].get("reason"), str):
                        reason = errors[0]["reason"]

    if not isinstance(status_code, int):
        status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
    )
