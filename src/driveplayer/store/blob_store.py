"""Durable binary object table keyed by Drive file id."""

from __future__ import annotations

import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from driveplayer.errors import StorageError
from driveplayer.models import CachedVideo, CachedVideoInfo
from driveplayer.util.mime import CACHED_VIDEO_MIME
from driveplayer.util.time import parse_rfc3339, to_rfc3339

from .kv_store import atomic_write, validate_key

logger = logging.getLogger(__name__)


class BlobStore(ABC):
    """Single object table of CachedVideo records keyed by file_id."""

    @abstractmethod
    def put(self, record: CachedVideo) -> None:
        """Insert or overwrite the record for record.file_id."""

    @abstractmethod
    def get(self, key: str) -> Optional[CachedVideo]:
        """Return the record, or None if absent."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the record. Absent keys are ignored."""

    @abstractmethod
    def list_info(self) -> list[CachedVideoInfo]:
        """Metadata of all records, without content."""

    @abstractmethod
    def touch(self, key: str, when: datetime) -> None:
        """Record an access time for LRU bookkeeping. Absent keys are ignored."""

    def keys(self) -> set[str]:
        return {info.file_id for info in self.list_info()}


class InMemoryBlobStore(BlobStore):
    def __init__(self) -> None:
        self._records: dict[str, CachedVideo] = {}
        self._lock = threading.Lock()

    def put(self, record: CachedVideo) -> None:
        with self._lock:
            self._records[record.file_id] = record

    def get(self, key: str) -> Optional[CachedVideo]:
        with self._lock:
            return self._records.get(key)

    def delete(self, key: str) -> None:
        with self._lock:
            self._records.pop(key, None)

    def list_info(self) -> list[CachedVideoInfo]:
        with self._lock:
            return [r.info() for r in self._records.values()]

    def touch(self, key: str, when: datetime) -> None:
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return
            self._records[key] = CachedVideo(
                file_id=record.file_id,
                file_name=record.file_name,
                content=record.content,
                downloaded_at=record.downloaded_at,
                mime_type=record.mime_type,
                last_accessed=when,
            )


class DirectoryBlobStore(BlobStore):
    """
    Stores each record as `<key>.bin` (content) plus `<key>.json` (metadata).

    Notes:
        - The metadata file is written last, so a record is visible only once
          its content is fully on disk.
        - A content file without metadata is treated as absent.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._dir = Path(directory)
        self._lock = threading.Lock()

    def put(self, record: CachedVideo) -> None:
        key = validate_key(record.file_id)
        with self._lock:
            try:
                atomic_write(self._bin_path(key), record.content)
                atomic_write(self._meta_path(key), _encode_meta(record.info()))
            except OSError as exc:
                logger.error("Failed to store cached video %s: %s", key, exc)
                raise StorageError(
                    "Failed to store cached video",
                    details={"file_id": key},
                    cause=exc,
                ) from exc

    def get(self, key: str) -> Optional[CachedVideo]:
        key = validate_key(key)
        with self._lock:
            info = self._read_meta(key)
            if info is None:
                return None
            try:
                content = self._bin_path(key).read_bytes()
            except FileNotFoundError:
                return None
            except OSError as exc:
                logger.error("Failed to read cached video %s: %s", key, exc)
                raise StorageError(
                    "Failed to read cached video",
                    details={"file_id": key},
                    cause=exc,
                ) from exc
        return CachedVideo(
            file_id=info.file_id,
            file_name=info.file_name,
            content=content,
            downloaded_at=info.downloaded_at,
            mime_type=info.mime_type,
            last_accessed=info.last_accessed,
        )

    def delete(self, key: str) -> None:
        key = validate_key(key)
        with self._lock:
            for path in (self._meta_path(key), self._bin_path(key)):
                try:
                    path.unlink()
                except FileNotFoundError:
                    continue
                except OSError as exc:
                    logger.error("Failed to delete %s: %s", path, exc)
                    raise StorageError(
                        "Failed to delete cached video",
                        details={"file_id": key},
                        cause=exc,
                    ) from exc

    def list_info(self) -> list[CachedVideoInfo]:
        with self._lock:
            if not self._dir.is_dir():
                return []
            infos: list[CachedVideoInfo] = []
            for meta_path in sorted(self._dir.glob("*.json")):
                info = self._read_meta(meta_path.stem)
                if info is not None:
                    infos.append(info)
            return infos

    def touch(self, key: str, when: datetime) -> None:
        key = validate_key(key)
        with self._lock:
            info = self._read_meta(key)
            if info is None:
                return
            updated = CachedVideoInfo(
                file_id=info.file_id,
                file_name=info.file_name,
                downloaded_at=info.downloaded_at,
                size=info.size,
                mime_type=info.mime_type,
                last_accessed=when,
            )
            try:
                atomic_write(self._meta_path(key), _encode_meta(updated))
            except OSError as exc:
                raise StorageError(
                    "Failed to update cached video metadata",
                    details={"file_id": key},
                    cause=exc,
                ) from exc

    def _bin_path(self, key: str) -> Path:
        return self._dir / f"{key}.bin"

    def _meta_path(self, key: str) -> Path:
        return self._dir / f"{key}.json"

    def _read_meta(self, key: str) -> Optional[CachedVideoInfo]:
        path = self._meta_path(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.error("Failed to read %s: %s", path, exc)
            raise StorageError(
                "Failed to read cached video metadata",
                details={"file_id": key},
                cause=exc,
            ) from exc
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt cache metadata: %s", path)
            return None
        try:
            return _decode_meta(data)
        except (KeyError, TypeError, ValueError):
            logger.warning("Ignoring malformed cache metadata: %s", path)
            return None


def _encode_meta(info: CachedVideoInfo) -> bytes:
    data: dict[str, Any] = {
        "fileId": info.file_id,
        "fileName": info.file_name,
        "downloadedAt": to_rfc3339(info.downloaded_at),
        "size": info.size,
        "mimeType": info.mime_type,
    }
    if info.last_accessed is not None:
        data["lastAccessed"] = to_rfc3339(info.last_accessed)
    return json.dumps(data, ensure_ascii=False).encode("utf-8")


def _decode_meta(data: dict[str, Any]) -> CachedVideoInfo:
    last_accessed = data.get("lastAccessed")
    return CachedVideoInfo(
        file_id=str(data["fileId"]),
        file_name=str(data.get("fileName", "")),
        downloaded_at=parse_rfc3339(data["downloadedAt"]),
        size=int(data["size"]),
        mime_type=str(data.get("mimeType") or CACHED_VIDEO_MIME),
        last_accessed=parse_rfc3339(last_accessed) if last_accessed else None,
    )
