"""DrivePlayerManager: wires session, tree sync, cache, progress and playback."""

from __future__ import annotations

import logging
from typing import Optional

from driveplayer.auth import Session, logout
from driveplayer.cache import VideoCache
from driveplayer.config import Settings
from driveplayer.errors import InvalidInputError, InvalidStateError, UnauthorizedError
from driveplayer.models import DriveNode
from driveplayer.player import PlaybackController
from driveplayer.progress import ProgressStore
from driveplayer.store import (
    BlobStore,
    DirectoryBlobStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)
from driveplayer.sync import FolderTreeSynchronizer
from driveplayer.util.ids import resolve_identifier

logger = logging.getLogger(__name__)


class DrivePlayerManager:
    """High-level facade for one client installation: login -> browse -> watch."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        kv: Optional[KeyValueStore] = None,
        blobs: Optional[BlobStore] = None,
        synchronizer: Optional[FolderTreeSynchronizer] = None,
        cache: Optional[VideoCache] = None,
    ) -> None:
        self._settings = settings or Settings()
        self._kv = kv or JsonFileKeyValueStore(self._settings.progress_dir)
        self._synchronizer = synchronizer or FolderTreeSynchronizer(settings=self._settings)
        self._cache = cache or VideoCache(
            blobs or DirectoryBlobStore(self._settings.cache_dir),
            settings=self._settings,
        )
        self._session: Optional[Session] = None
        self._progress: Optional[ProgressStore] = None
        self._tree: Optional[DriveNode] = None
        self._folder_id: Optional[str] = None
        self._player: Optional[PlaybackController] = None

    # ----------------------------
    # Session
    # ----------------------------
    @property
    def session(self) -> Session:
        if self._session is None:
            raise UnauthorizedError("Not logged in. Call login() first.")
        return self._session

    def login(self, session: Session) -> None:
        """Start a session and load (or reset) the user's progress envelope."""
        user_id = session.user_id
        if not user_id:
            raise InvalidInputError("Session carries no user identity (email/subject)")
        if self._session is not None:
            self.logout()
        self._session = session
        self._progress = ProgressStore.load(self._kv, user_id)
        logger.info("Logged in as %s", user_id)

    def logout(self) -> None:
        """Close the player, drop session state and revoke the token (best effort)."""
        if self._player is not None:
            self._player.close()
            self._player = None
        session, self._session = self._session, None
        self._progress = None
        self._tree = None
        self._folder_id = None
        logout(session)

    # ----------------------------
    # Browsing
    # ----------------------------
    @property
    def progress(self) -> ProgressStore:
        if self._progress is None:
            raise UnauthorizedError("Not logged in. Call login() first.")
        return self._progress

    @property
    def cache(self) -> VideoCache:
        return self._cache

    @property
    def tree(self) -> Optional[DriveNode]:
        return self._tree

    @property
    def folder_id(self) -> Optional[str]:
        return self._folder_id

    def open_folder(self, text: str) -> DriveNode:
        """
        Resolve a folder link/id and fetch its whole tree.

        The previous tree is kept if the fetch fails.
        """
        identifier = resolve_identifier(text)
        if identifier is None:
            raise InvalidInputError(
                "Invalid folder id. Use a Google Drive link or a valid id.",
                details={"input": text},
            )
        tree = self._synchronizer.fetch_tree(identifier, self.session)
        self._tree = tree
        self._folder_id = identifier
        return tree

    # ----------------------------
    # Playback
    # ----------------------------
    @property
    def player(self) -> Optional[PlaybackController]:
        return self._player

    def open_video(self, node: DriveNode) -> PlaybackController:
        """Open a player for a video node; marks it InProgress immediately."""
        if not node.is_video:
            raise InvalidInputError("Node is not a video", details={"file_id": node.id})
        if self._folder_id is None:
            raise InvalidStateError("No folder opened. Call open_folder() first.")
        if self._player is not None:
            self._player.close()
        player = PlaybackController(
            node.id,
            node.name,
            self._folder_id,
            cache=self._cache,
            progress=self.progress,
            embed_timeout=self._settings.embed_timeout,
        )
        player.open()
        self._player = player
        return player
