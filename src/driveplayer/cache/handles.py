"""Ephemeral object URLs for cached content."""

from __future__ import annotations

import threading
from typing import Union

from driveplayer.errors import InvalidStateError
from driveplayer.models import PlaybackHandle
from driveplayer.util.ids import new_handle_url


class HandleRegistry:
    """
    Issues playback handles and resolves them to bytes until revoked.

    Every handle holds a reference to its content; revoke handles that are
    no longer needed to release that memory.
    """

    def __init__(self) -> None:
        self._content: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def create(self, file_id: str, content: bytes, mime_type: str) -> PlaybackHandle:
        handle = PlaybackHandle(
            url=new_handle_url(),
            file_id=file_id,
            mime_type=mime_type,
            size=len(content),
        )
        with self._lock:
            self._content[handle.url] = content
        return handle

    def read(self, handle: Union[PlaybackHandle, str]) -> bytes:
        url = _url_of(handle)
        with self._lock:
            content = self._content.get(url)
        if content is None:
            raise InvalidStateError("Handle was revoked or never issued", details={"url": url})
        return content

    def is_live(self, handle: Union[PlaybackHandle, str]) -> bool:
        with self._lock:
            return _url_of(handle) in self._content

    def revoke(self, handle: Union[PlaybackHandle, str]) -> None:
        with self._lock:
            self._content.pop(_url_of(handle), None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._content)


def _url_of(handle: Union[PlaybackHandle, str]) -> str:
    return handle.url if isinstance(handle, PlaybackHandle) else handle
