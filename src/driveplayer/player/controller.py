"""Playback controller: remote embed first, local cache on demand."""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Callable, Optional

from driveplayer.errors import DrivePlayerError, InvalidStateError

from .states import PlaybackEvent, PlaybackState, next_state

if TYPE_CHECKING:
    from driveplayer.auth import Session
    from driveplayer.cache import VideoCache
    from driveplayer.models import PlaybackHandle
    from driveplayer.progress import ProgressStore

logger = logging.getLogger(__name__)

EMBED_URL_TEMPLATE = "https://drive.google.com/file/d/{file_id}/preview"
DEFAULT_EMBED_TIMEOUT = 10.0


class PlaybackController:
    """
    Drives playback of one video through the states in `states.py`.

    Usage:
        player = PlaybackController(file_id, name, folder_id, cache=cache, progress=store)
        player.open()                      # REMOTE_EMBED, marks InProgress
        player.embed_error()               # REMOTE_EMBED_FAILED
        player.request_offline(session)    # DOWNLOADING -> LOCAL_PLAYBACK
        player.mark_complete()             # CLOSED

    Failures of offline playback never raise: the controller stays in its
    last good state and exposes the message in `error_message`.
    """

    def __init__(
        self,
        file_id: str,
        file_name: str,
        folder_id: str,
        *,
        cache: VideoCache,
        progress: Optional[ProgressStore] = None,
        embed_timeout: float = DEFAULT_EMBED_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.file_id = file_id
        self.file_name = file_name
        self.folder_id = folder_id
        self._cache = cache
        self._progress = progress
        self._embed_timeout = embed_timeout
        self._clock = clock

        self._state = PlaybackState.REMOTE_EMBED
        self._opened = False
        self._opened_at: Optional[float] = None
        self._embed_loaded = False
        self._handle: Optional[PlaybackHandle] = None
        self._cancel = threading.Event()

        self.error_message: Optional[str] = None
        self.download_progress = 0.0

        self.is_playing = False
        self.current_time = 0.0
        self.duration = 0.0
        self.volume = 1.0

    # ----------------------------
    # Read APIs
    # ----------------------------
    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def handle(self) -> Optional[PlaybackHandle]:
        return self._handle

    @property
    def embed_url(self) -> str:
        return EMBED_URL_TEMPLATE.format(file_id=self.file_id)

    @property
    def elapsed(self) -> float:
        if self._opened_at is None:
            return 0.0
        return max(0.0, self._clock() - self._opened_at)

    @property
    def download_offered(self) -> bool:
        """Whether to show the offline/download affordance."""
        if self._state is PlaybackState.REMOTE_EMBED_FAILED:
            return True
        if self._state is not PlaybackState.REMOTE_EMBED or self._embed_loaded:
            return False
        return self._opened and self.elapsed >= self._embed_timeout

    # ----------------------------
    # Lifecycle
    # ----------------------------
    def open(self) -> None:
        """Enter REMOTE_EMBED, start the embed timer and mark the video InProgress."""
        if self._state is PlaybackState.CLOSED:
            raise InvalidStateError("Player is closed")
        if self._opened:
            return
        self._opened = True
        self._opened_at = self._clock()
        if self._progress is not None:
            self._progress.mark_in_progress(self.file_id, self.file_name, self.folder_id)

    def embed_loaded(self) -> None:
        if self._state is PlaybackState.REMOTE_EMBED:
            self._embed_loaded = True

    def embed_error(self) -> None:
        if self._state is PlaybackState.REMOTE_EMBED_FAILED:
            return
        self._transition(PlaybackEvent.EMBED_ERROR)

    def request_offline(self, session: Optional[Session]) -> bool:
        """
        Switch to local playback, downloading first when not cached.

        Returns True when LOCAL_PLAYBACK was entered.
        """
        if self._state not in (PlaybackState.REMOTE_EMBED, PlaybackState.REMOTE_EMBED_FAILED):
            raise InvalidStateError(
                "Offline playback can only be requested from the embed",
                details={"state": self._state.value},
            )
        self.error_message = None

        if self._cache.is_cached(self.file_id):
            try:
                handle = self._cache.play(self.file_id)
            except DrivePlayerError as exc:
                logger.error("Failed to open cached video %s: %s", self.file_id, exc)
                self.error_message = str(exc)
                return False
            if handle is not None:
                self._enter_local(PlaybackEvent.PLAY_CACHED, handle)
                return True

        if session is None or not session.access_token:
            self.error_message = "Access token not available"
            return False

        prior = self._state
        self._transition(PlaybackEvent.DOWNLOAD_START)
        self.download_progress = 0.0
        try:
            handle = self._cache.download(
                self.file_id,
                self.file_name,
                session,
                on_progress=self._on_progress,
                cancel=self._cancel,
            )
        except DrivePlayerError as exc:
            logger.error("Download of %s failed: %s", self.file_id, exc)
            self.error_message = str(exc) or "Failed to download video"
            self.download_progress = 0.0
            if self._state is PlaybackState.DOWNLOADING:
                self._state = prior
            return False

        if self._state is PlaybackState.CLOSED:
            # Closed while downloading; the result is no longer wanted.
            self._cache.release(handle)
            return False

        self.download_progress = 0.0
        self._enter_local(PlaybackEvent.DOWNLOAD_OK, handle)
        return True

    def close(self) -> None:
        """Release the handle and stop. Safe to call from any state, repeatedly."""
        if self._state is PlaybackState.CLOSED:
            return
        self._cancel.set()
        self._transition(PlaybackEvent.CLOSE)
        if self._handle is not None:
            self._cache.release(self._handle)
            self._handle = None
        self.is_playing = False

    # ----------------------------
    # Local playback controls
    # ----------------------------
    def toggle_play(self) -> bool:
        self._require_local()
        self.is_playing = not self.is_playing
        return self.is_playing

    def set_duration(self, duration: float) -> None:
        self._require_local()
        self.duration = max(0.0, float(duration))
        self.current_time = min(self.current_time, self.duration)

    def seek(self, position: float) -> float:
        self._require_local()
        self.current_time = min(max(0.0, float(position)), self.duration)
        return self.current_time

    def set_volume(self, volume: float) -> float:
        self._require_local()
        self.volume = min(max(0.0, float(volume)), 1.0)
        return self.volume

    def delete_from_cache(self) -> None:
        self._require_local()
        self._cache.delete(self.file_id)
        self.close()

    def mark_complete(self) -> None:
        self._require_local()
        if self._progress is not None:
            self._progress.mark_completed(self.file_id, self.file_name, self.folder_id)
        self.close()

    # ----------------------------
    # Internals
    # ----------------------------
    def _transition(self, event: PlaybackEvent) -> None:
        self._state = next_state(self._state, event)

    def _enter_local(self, event: PlaybackEvent, handle: PlaybackHandle) -> None:
        self._transition(event)
        self._handle = handle
        self.current_time = 0.0
        self.is_playing = True

    def _on_progress(self, percent: float) -> None:
        self.download_progress = max(self.download_progress, percent)

    def _require_local(self) -> None:
        if self._state is not PlaybackState.LOCAL_PLAYBACK:
            raise InvalidStateError(
                "Only available during local playback",
                details={"state": self._state.value},
            )
