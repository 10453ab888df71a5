"""Offline video cache: streamed download, replay and deletion."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Iterator, Optional, Protocol

from driveplayer.errors import (
    DownloadCancelledError,
    InvalidInputError,
    UnauthorizedError,
)
from driveplayer.models import CachedVideo, CachedVideoInfo, PlaybackHandle
from driveplayer.store import BlobStore
from driveplayer.util.mime import CACHED_VIDEO_MIME
from driveplayer.util.time import now_utc

from .handles import HandleRegistry

if TYPE_CHECKING:
    from driveplayer.auth import Session
    from driveplayer.config import Settings
    from driveplayer.controller import MediaChunk

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class MediaController(Protocol):
    def iter_media(self, file_id: str) -> Iterator[MediaChunk]: ...


ControllerFactory = Callable[["Session"], MediaController]


@dataclass(slots=True)
class _FileLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


def _default_controller_factory(settings: Optional[Settings]) -> ControllerFactory:
    def factory(session: Session) -> MediaController:
        from driveplayer.controller import GoogleDriveController

        return GoogleDriveController(session, settings=settings)

    return factory


class VideoCache:
    """
    Durable cache of whole-file video downloads keyed by Drive file id.

    Notes:
        - At most one download per file id runs at a time; concurrent
          callers for the same id wait and then download again (the last
          completed download wins).
        - With `max_bytes` set, least-recently-used entries are evicted
          after each successful download until the cache fits. The entry
          just downloaded is never evicted.
    """

    def __init__(
        self,
        store: BlobStore,
        *,
        controller_factory: Optional[ControllerFactory] = None,
        settings: Optional[Settings] = None,
        max_bytes: Optional[int] = None,
        registry: Optional[HandleRegistry] = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._store = store
        self._controller_factory = controller_factory or _default_controller_factory(settings)
        self._max_bytes = max_bytes if max_bytes is not None else (
            settings.cache_max_bytes if settings else None
        )
        self._registry = registry or HandleRegistry()
        self._clock = clock
        self._locks: dict[str, _FileLock] = {}
        self._locks_guard = threading.Lock()
        self._active: set[str] = set()

    @property
    def registry(self) -> HandleRegistry:
        return self._registry

    @property
    def max_bytes(self) -> Optional[int]:
        return self._max_bytes

    # ----------------------------
    # Public API
    # ----------------------------
    def download(
        self,
        file_id: str,
        file_name: str,
        session: Optional[Session],
        *,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[threading.Event] = None,
    ) -> PlaybackHandle:
        """
        Download file_id in full, cache it, and return a fresh handle.

        on_progress receives a non-decreasing percentage after each chunk
        when the total size is known.

        Raises:
            InvalidInputError: empty file_id.
            UnauthorizedError: no session / access token, or HTTP 401/403.
            NotFoundError, TransientError: remote failures.
            DownloadCancelledError: `cancel` was set mid-transfer.
            StorageError: the record could not be persisted.
        """
        if not isinstance(file_id, str) or not file_id.strip():
            raise InvalidInputError("file_id must be a non-empty string")
        if session is None or not session.access_token:
            raise UnauthorizedError("An authenticated session is required to download")

        with self._file_lock(file_id):
            self._active.add(file_id)
            try:
                content = self._fetch(file_id, session, on_progress, cancel)
                record = CachedVideo(
                    file_id=file_id,
                    file_name=file_name,
                    content=content,
                    downloaded_at=self._clock(),
                )
                self._store.put(record)
            except Exception as exc:
                logger.error("Download of %s failed: %s", file_id, exc)
                raise
            finally:
                self._active.discard(file_id)

            logger.info("Cached %s (%d bytes)", file_id, record.size)
            self._evict(keep=file_id)
            return self._registry.create(file_id, content, CACHED_VIDEO_MIME)

    def play(self, file_id: str) -> Optional[PlaybackHandle]:
        """Return a fresh handle for a cached video, or None if not cached."""
        record = self._store.get(file_id)
        if record is None:
            return None
        self._store.touch(file_id, self._clock())
        return self._registry.create(file_id, record.content, record.mime_type)

    def delete(self, file_id: str) -> None:
        """Remove the cached video. Deleting an absent id succeeds."""
        self._store.delete(file_id)
        logger.info("Deleted cached video %s", file_id)

    def list(self) -> set[str]:
        return self._store.keys()

    def is_cached(self, file_id: str) -> bool:
        return file_id in self._store.keys()

    def is_downloading(self, file_id: str) -> bool:
        return file_id in self._active

    def list_info(self) -> list[CachedVideoInfo]:
        return self._store.list_info()

    def total_size(self) -> int:
        return sum(info.size for info in self._store.list_info())

    def read(self, handle: PlaybackHandle) -> bytes:
        return self._registry.read(handle)

    def release(self, handle: PlaybackHandle) -> None:
        self._registry.revoke(handle)

    # ----------------------------
    # Internals
    # ----------------------------
    @contextmanager
    def _file_lock(self, file_id: str) -> Iterator[None]:
        with self._locks_guard:
            entry = self._locks.get(file_id)
            if entry is None:
                entry = self._locks[file_id] = _FileLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[file_id]

    def _fetch(
        self,
        file_id: str,
        session: Session,
        on_progress: Optional[ProgressCallback],
        cancel: Optional[threading.Event],
    ) -> bytes:
        controller = self._controller_factory(session)
        chunks: list[bytes] = []
        bytes_read = 0
        last_percent = 0.0

        logger.info("Downloading %s", file_id)
        for chunk in controller.iter_media(file_id):
            if cancel is not None and cancel.is_set():
                raise DownloadCancelledError(
                    "Download cancelled", details={"file_id": file_id}
                )
            chunks.append(chunk.data)
            bytes_read += len(chunk.data)
            if chunk.total_size and on_progress is not None:
                percent = min(bytes_read / chunk.total_size * 100, 100.0)
                last_percent = max(last_percent, percent)
                on_progress(last_percent)

        return b"".join(chunks)

    def _evict(self, *, keep: str) -> None:
        if self._max_bytes is None:
            return
        infos = sorted(self._store.list_info(), key=lambda info: info.recency)
        total = sum(info.size for info in infos)
        for info in infos:
            if total <= self._max_bytes:
                break
            if info.file_id == keep:
                continue
            self._store.delete(info.file_id)
            total -= info.size
            logger.info("Evicted cached video %s (%d bytes)", info.file_id, info.size)
