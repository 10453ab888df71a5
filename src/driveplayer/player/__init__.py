"""Video playback state machine."""

from __future__ import annotations

from .controller import EMBED_URL_TEMPLATE, PlaybackController
from .states import TRANSITIONS, PlaybackEvent, PlaybackState, next_state

__all__ = [
    "PlaybackController",
    "PlaybackState",
    "PlaybackEvent",
    "TRANSITIONS",
    "next_state",
    "EMBED_URL_TEMPLATE",
]
