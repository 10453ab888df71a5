"""Recursive folder expansion into an immutable DriveNode tree."""

from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import TYPE_CHECKING, Callable, Optional, Protocol

from driveplayer.errors import (
    InvalidInputError,
    TreeCycleError,
    TreeDepthError,
    UnauthorizedError,
)
from driveplayer.models import DriveNode, FileInfo
from driveplayer.util.mime import is_folder
from driveplayer.util.sorting import natural_key

if TYPE_CHECKING:
    from driveplayer.auth import Session
    from driveplayer.config import Settings

logger = logging.getLogger(__name__)


class ListingController(Protocol):
    def get(self, file_id: str) -> FileInfo: ...

    def list_children(self, folder_id: str) -> list[FileInfo]: ...


ControllerFactory = Callable[["Session"], ListingController]


def _default_controller_factory(settings: Optional[Settings]) -> ControllerFactory:
    def factory(session: Session) -> ListingController:
        from driveplayer.controller import GoogleDriveController

        return GoogleDriveController(session, settings=settings)

    return factory


class FolderTreeSynchronizer:
    """
    Expand a Drive folder into a DriveNode tree.

    Policy:
        - Breadth-first, one level at a time; the folders of a level are
          listed concurrently on a pool of at most `max_workers` threads.
        - A folder already listed (shared between branches) is not listed
          twice within one fetch.
        - The first listing failure cancels pending listings and propagates.
          No partial tree is ever returned.
        - A folder found among its own ancestors raises TreeCycleError;
          nesting deeper than `max_depth` raises TreeDepthError.
    """

    def __init__(
        self,
        controller_factory: Optional[ControllerFactory] = None,
        *,
        settings: Optional[Settings] = None,
        max_workers: Optional[int] = None,
        max_depth: Optional[int] = None,
    ) -> None:
        self._controller_factory = controller_factory or _default_controller_factory(settings)
        if max_workers is None:
            max_workers = settings.max_workers if settings else 8
        if max_depth is None:
            max_depth = settings.max_depth if settings else 32
        self._max_workers = max_workers
        self._max_depth = max_depth
        if self._max_workers < 1:
            raise InvalidInputError("max_workers must be >= 1")
        if self._max_depth < 1:
            raise InvalidInputError("max_depth must be >= 1")

    def fetch_tree(self, identifier: str, session: Optional[Session]) -> DriveNode:
        """
        Fetch the folder `identifier` and all of its descendants.

        Raises:
            InvalidInputError: empty identifier, or the item is not a folder.
            UnauthorizedError: no session / access token, or HTTP 401/403.
            NotFoundError: the folder (or a subfolder) does not exist.
            TransientError: network, rate-limit or upstream failures.
            TreeCycleError, TreeDepthError: pathological structures.
        """
        if not isinstance(identifier, str) or not identifier.strip():
            raise InvalidInputError("Folder identifier must be a non-empty string")
        if session is None or not session.access_token:
            raise UnauthorizedError("An authenticated session is required")

        controller = self._controller_factory(session)
        root = controller.get(identifier)
        if not is_folder(root.mime_type):
            raise InvalidInputError(
                "Identifier does not refer to a folder",
                details={"file_id": identifier, "mime_type": root.mime_type},
            )

        if not root.file_id:
            root.file_id = identifier

        logger.info("Fetching folder tree %s", identifier)
        listings = self._expand(controller, root.file_id)
        tree = self._assemble(root, listings)
        logger.info(
            "Fetched folder tree %s (%d folders listed)", identifier, len(listings)
        )
        return tree

    # ----------------------------
    # Internals
    # ----------------------------
    def _expand(
        self,
        controller: ListingController,
        root_id: str,
    ) -> dict[str, list[FileInfo]]:
        listings: dict[str, list[FileInfo]] = {}
        # Each frontier entry: (folder_id, ancestor chain ending with folder_id).
        frontier: list[tuple[str, tuple[str, ...]]] = [(root_id, (root_id,))]
        depth = 0

        with ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="driveplayer-list",
        ) as pool:
            while frontier:
                if depth >= self._max_depth:
                    raise TreeDepthError(
                        "Folder tree is deeper than the allowed maximum",
                        details={"max_depth": self._max_depth},
                    )

                pending = [fid for fid, _ in frontier if fid not in listings]
                listings.update(self._list_level(pool, controller, pending))

                next_frontier: list[tuple[str, tuple[str, ...]]] = []
                for folder_id, chain in frontier:
                    for child in listings[folder_id]:
                        if not is_folder(child.mime_type):
                            continue
                        if child.file_id in chain:
                            raise TreeCycleError(
                                "Folder is its own ancestor",
                                details={"file_id": child.file_id, "chain": list(chain)},
                            )
                        next_frontier.append((child.file_id, chain + (child.file_id,)))

                frontier = next_frontier
                depth += 1

        return listings

    def _list_level(
        self,
        pool: ThreadPoolExecutor,
        controller: ListingController,
        folder_ids: list[str],
    ) -> dict[str, list[FileInfo]]:
        futures: dict[str, Future[list[FileInfo]]] = {}
        for folder_id in dict.fromkeys(folder_ids):
            futures[folder_id] = pool.submit(controller.list_children, folder_id)
        if not futures:
            return {}

        done, not_done = wait(futures.values(), return_when=FIRST_EXCEPTION)
        for future in done:
            exc = future.exception()
            if exc is not None:
                for other in not_done:
                    other.cancel()
                raise exc

        return {
            folder_id: sorted(future.result(), key=lambda info: natural_key(info.name))
            for folder_id, future in futures.items()
        }

    def _assemble(self, info: FileInfo, listings: dict[str, list[FileInfo]]) -> DriveNode:
        if not is_folder(info.mime_type):
            return DriveNode.from_file_info(info)
        children = [self._assemble(child, listings) for child in listings.get(info.file_id, [])]
        return DriveNode.from_file_info(info, children)
