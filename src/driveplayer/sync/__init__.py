"""Folder tree synchronization."""

from __future__ import annotations

from .tree_sync import FolderTreeSynchronizer, ListingController

__all__ = ["FolderTreeSynchronizer", "ListingController"]
