"""Data model for raw Drive items as returned by the API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(slots=True)
class FileInfo:
    """
    A Drive item as listed by the controller.

    Notes:
        - This is the wire-level view; the tree exposes DriveNode instead.
        - Items with an empty file_id, name or mime_type are dropped before
          they reach the tree.
    """

    file_id: str
    name: str
    mime_type: str

    parents: list[str] = field(default_factory=list)
    trashed: bool = False
    modified_time: Optional[datetime] = None
    size: Optional[int] = None
    web_view_link: Optional[str] = None
    web_content_link: Optional[str] = None
    thumbnail_link: Optional[str] = None

    def is_complete(self) -> bool:
        return bool(self.file_id and self.name and self.mime_type)
