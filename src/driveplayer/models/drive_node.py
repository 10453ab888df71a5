"""Immutable folder-tree nodes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, Optional, Sequence

from driveplayer.util.mime import NodeKind, classify

from .file_info import FileInfo


@dataclass(frozen=True, slots=True)
class DriveNode:
    """
    One entry of a resolved folder tree.

    `children` is a tuple (possibly empty) for folders and None for
    everything else. The kind is derived from (mime_type, name) on access.
    """

    id: str
    name: str
    mime_type: str
    size: Optional[int] = None
    modified_time: Optional[datetime] = None
    web_view_link: Optional[str] = None
    web_content_link: Optional[str] = None
    thumbnail_link: Optional[str] = None
    children: Optional[tuple[DriveNode, ...]] = None

    @classmethod
    def from_file_info(
        cls,
        info: FileInfo,
        children: Optional[Sequence[DriveNode]] = None,
    ) -> DriveNode:
        kind = classify(info.mime_type, info.name)
        if kind is NodeKind.FOLDER:
            kids: Optional[tuple[DriveNode, ...]] = tuple(children or ())
        else:
            kids = None
        return cls(
            id=info.file_id,
            name=info.name,
            mime_type=info.mime_type,
            size=info.size,
            modified_time=info.modified_time,
            web_view_link=info.web_view_link,
            web_content_link=info.web_content_link,
            thumbnail_link=info.thumbnail_link,
            children=kids,
        )

    @property
    def kind(self) -> NodeKind:
        return classify(self.mime_type, self.name)

    @property
    def is_folder(self) -> bool:
        return self.kind is NodeKind.FOLDER

    @property
    def is_video(self) -> bool:
        return self.kind is NodeKind.VIDEO

    def iter_nodes(self) -> Iterator[DriveNode]:
        """Depth-first, pre-order walk of this subtree (self included)."""
        stack: list[DriveNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            if node.children:
                stack.extend(reversed(node.children))

    def find(self, node_id: str) -> Optional[DriveNode]:
        for node in self.iter_nodes():
            if node.id == node_id:
                return node
        return None
