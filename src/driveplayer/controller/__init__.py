"""Internal controller exports for driveplayer."""

from __future__ import annotations

from .drive_controller import GoogleDriveController, MediaChunk

__all__ = ["GoogleDriveController", "MediaChunk"]
