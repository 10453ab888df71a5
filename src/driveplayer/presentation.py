"""Text rendering of folder trees (the thin presentation layer)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional

from driveplayer.models import DriveNode, NodeKind

if TYPE_CHECKING:
    from driveplayer.cache import VideoCache
    from driveplayer.progress import ProgressStore


@dataclass(frozen=True, slots=True)
class NodeCounts:
    folders: int = 0
    videos: int = 0
    others: int = 0


def count_nodes(nodes: Iterable[DriveNode]) -> NodeCounts:
    """Count descendants by kind, recursively (the given nodes included)."""
    folders = videos = others = 0
    for top in nodes:
        for node in top.iter_nodes():
            kind = node.kind
            if kind is NodeKind.FOLDER:
                folders += 1
            elif kind is NodeKind.VIDEO:
                videos += 1
            else:
                others += 1
    return NodeCounts(folders=folders, videos=videos, others=others)


def format_file_size(size: Optional[int]) -> str:
    if size is None:
        return ""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    if size < 1024 * 1024 * 1024:
        return f"{size / (1024 * 1024):.1f} MB"
    return f"{size / (1024 * 1024 * 1024):.2f} GB"


_ICONS = {
    NodeKind.FOLDER: "[dir]",
    NodeKind.VIDEO: "[vid]",
    NodeKind.OTHER: "[file]",
}


def render_tree(
    root: DriveNode,
    *,
    progress: Optional[ProgressStore] = None,
    cache: Optional[VideoCache] = None,
) -> list[str]:
    """
    Render the children of root as indented lines.

    Completed videos are marked "[done]", cached ones "(offline)".
    """
    cached = cache.list() if cache is not None else set()
    lines: list[str] = []

    def walk(nodes: tuple[DriveNode, ...], depth: int) -> None:
        for node in nodes:
            icon = _ICONS[node.kind]
            if node.is_video and progress is not None and progress.is_completed(node.id):
                icon = "[done]"
            parts = ["  " * depth + icon, node.name]
            size = format_file_size(node.size)
            if size and not node.is_folder:
                parts.append(f"({size})")
            if node.id in cached:
                parts.append("(offline)")
            lines.append(" ".join(parts))
            if node.children:
                walk(node.children, depth + 1)

    walk(root.children or (), 0)
    return lines
