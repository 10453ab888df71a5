"""Offline video cache."""

from __future__ import annotations

from .handles import HandleRegistry
from .video_cache import MediaController, VideoCache

__all__ = ["VideoCache", "HandleRegistry", "MediaController"]
