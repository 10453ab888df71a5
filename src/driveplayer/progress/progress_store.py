"""Per-user watch progress persisted as a single JSON envelope."""

from __future__ import annotations

import copy
import logging
from datetime import datetime
from typing import Callable, Optional

from driveplayer.errors import InvalidInputError, StorageError
from driveplayer.models import ProgressData, VideoProgress, WatchStatus
from driveplayer.store import KeyValueStore
from driveplayer.util.time import now_utc

logger = logging.getLogger(__name__)

STORAGE_KEY = "driveplayer_progress"


class ProgressStore:
    """
    Watch progress of one user.

    Notes:
        - The whole envelope is rewritten on every mutation.
        - Only one envelope is stored. Loading for a different user starts
          from an empty envelope; the previous user's data stays in storage
          until this store's first write replaces it.
        - If a write fails, the in-memory envelope is restored to the last
          persisted state and StorageError propagates.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        data: ProgressData,
        *,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._kv = kv
        self._data = data
        self._clock = clock

    @classmethod
    def load(
        cls,
        kv: KeyValueStore,
        user_id: str,
        *,
        clock: Callable[[], datetime] = now_utc,
    ) -> ProgressStore:
        if not user_id or not user_id.strip():
            raise InvalidInputError("user_id must be a non-empty string")

        data: Optional[ProgressData] = None
        try:
            raw = kv.get(STORAGE_KEY)
        except StorageError as exc:
            logger.error("Failed to load progress envelope: %s", exc)
            raw = None

        if isinstance(raw, dict):
            try:
                stored = ProgressData.from_dict(raw)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Discarding malformed progress envelope: %s", exc)
            else:
                if stored.user_id == user_id:
                    data = stored
                else:
                    logger.info("Stored progress belongs to another user; starting fresh")

        if data is None:
            data = ProgressData(user_id=user_id, updated_at=clock())
        return cls(kv, data, clock=clock)

    @property
    def user_id(self) -> str:
        return self._data.user_id

    @property
    def data(self) -> ProgressData:
        """A copy of the current envelope."""
        return copy.deepcopy(self._data)

    # ----------------------------
    # Mutations
    # ----------------------------
    def mark_in_progress(self, file_id: str, file_name: str, folder_id: str) -> VideoProgress:
        """
        Record that the video was opened.

        A Completed video moves back to InProgress; completed_at keeps the
        time it was last completed.
        """
        return self._upsert(file_id, file_name, folder_id, WatchStatus.IN_PROGRESS)

    def mark_completed(self, file_id: str, file_name: str, folder_id: str) -> VideoProgress:
        return self._upsert(file_id, file_name, folder_id, WatchStatus.COMPLETED)

    def clear_all(self) -> None:
        def mutate(data: ProgressData) -> None:
            data.videos.clear()
            data.last_video_file_id = None

        self._commit(mutate)

    def clear_for_folder(self, folder_id: str) -> int:
        """Remove records of one folder. Returns the number removed."""
        removed = [fid for fid, v in self._data.videos.items() if v.folder_id == folder_id]

        def mutate(data: ProgressData) -> None:
            for fid in removed:
                del data.videos[fid]
            if data.last_video_file_id and data.last_video_file_id not in data.videos:
                data.last_video_file_id = None

        self._commit(mutate)
        return len(removed)

    # ----------------------------
    # Queries
    # ----------------------------
    def get_progress(self, file_id: str) -> Optional[VideoProgress]:
        record = self._data.videos.get(file_id)
        return copy.copy(record) if record is not None else None

    def get_last_video(self) -> Optional[VideoProgress]:
        if not self._data.last_video_file_id:
            return None
        return self.get_progress(self._data.last_video_file_id)

    def get_completed_count(self, folder_id: Optional[str] = None) -> int:
        return sum(
            1
            for v in self._data.videos.values()
            if v.status is WatchStatus.COMPLETED
            and (folder_id is None or v.folder_id == folder_id)
        )

    def get_total_count(self, folder_id: Optional[str] = None) -> int:
        if folder_id is None:
            return len(self._data.videos)
        return sum(1 for v in self._data.videos.values() if v.folder_id == folder_id)

    def is_completed(self, file_id: str) -> bool:
        record = self._data.videos.get(file_id)
        return record is not None and record.status is WatchStatus.COMPLETED

    # ----------------------------
    # Internals
    # ----------------------------
    def _upsert(
        self,
        file_id: str,
        file_name: str,
        folder_id: str,
        status: WatchStatus,
    ) -> VideoProgress:
        if not file_id:
            raise InvalidInputError("file_id must be a non-empty string")

        def mutate(data: ProgressData) -> None:
            now = data.updated_at
            existing = data.videos.get(file_id)
            completed_at = existing.completed_at if existing else None
            if status is WatchStatus.COMPLETED:
                completed_at = now
            data.videos[file_id] = VideoProgress(
                file_id=file_id,
                file_name=file_name,
                folder_id=folder_id,
                status=status,
                last_watched=now,
                created_at=existing.created_at if existing else now,
                completed_at=completed_at,
            )
            data.last_video_file_id = file_id
            data.last_folder_id = folder_id

        self._commit(mutate)
        return copy.copy(self._data.videos[file_id])

    def _commit(self, mutate: Callable[[ProgressData], None]) -> None:
        staged = copy.deepcopy(self._data)
        staged.updated_at = self._clock()
        mutate(staged)
        try:
            self._kv.set(STORAGE_KEY, staged.to_dict())
        except StorageError as exc:
            logger.error("Failed to persist progress for %s: %s", staged.user_id, exc)
            raise
        self._data = staged
