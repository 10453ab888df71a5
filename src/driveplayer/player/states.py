"""Playback states, events and the transition table."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from driveplayer.errors import InvalidStateError


class PlaybackState(str, Enum):
    REMOTE_EMBED = "remote_embed"
    REMOTE_EMBED_FAILED = "remote_embed_failed"
    DOWNLOADING = "downloading"
    LOCAL_PLAYBACK = "local_playback"
    CLOSED = "closed"


class PlaybackEvent(str, Enum):
    EMBED_ERROR = "embed_error"
    PLAY_CACHED = "play_cached"
    DOWNLOAD_START = "download_start"
    DOWNLOAD_OK = "download_ok"
    CLOSE = "close"


_S = PlaybackState
_E = PlaybackEvent

TRANSITIONS: dict[tuple[PlaybackState, PlaybackEvent], PlaybackState] = {
    (_S.REMOTE_EMBED, _E.EMBED_ERROR): _S.REMOTE_EMBED_FAILED,
    (_S.REMOTE_EMBED, _E.PLAY_CACHED): _S.LOCAL_PLAYBACK,
    (_S.REMOTE_EMBED_FAILED, _E.PLAY_CACHED): _S.LOCAL_PLAYBACK,
    (_S.REMOTE_EMBED, _E.DOWNLOAD_START): _S.DOWNLOADING,
    (_S.REMOTE_EMBED_FAILED, _E.DOWNLOAD_START): _S.DOWNLOADING,
    (_S.DOWNLOADING, _E.DOWNLOAD_OK): _S.LOCAL_PLAYBACK,
    (_S.REMOTE_EMBED, _E.CLOSE): _S.CLOSED,
    (_S.REMOTE_EMBED_FAILED, _E.CLOSE): _S.CLOSED,
    (_S.DOWNLOADING, _E.CLOSE): _S.CLOSED,
    (_S.LOCAL_PLAYBACK, _E.CLOSE): _S.CLOSED,
}
# A failed download returns to whichever state it started from, so it is
# handled by the controller rather than listed here.


def next_state(state: PlaybackState, event: PlaybackEvent) -> PlaybackState:
    target: Optional[PlaybackState] = TRANSITIONS.get((state, event))
    if target is None:
        raise InvalidStateError(
            f"Event {event.value} is not allowed in state {state.value}",
            details={"state": state.value, "event": event.value},
        )
    return target
