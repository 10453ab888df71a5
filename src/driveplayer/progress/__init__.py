"""Watch-progress tracking."""

from __future__ import annotations

from .progress_store import STORAGE_KEY, ProgressStore

__all__ = ["ProgressStore", "STORAGE_KEY"]
