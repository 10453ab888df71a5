from __future__ import annotations

import re
import uuid
from typing import Optional

_BARE_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_URL_ID_RES: tuple[re.Pattern[str], ...] = (
    re.compile(r"/folders/([A-Za-z0-9_-]+)"),
    re.compile(r"/file/d/([A-Za-z0-9_-]+)"),
    re.compile(r"[?&]id=([A-Za-z0-9_-]+)"),
)
_MIN_BARE_ID_LENGTH = 11


def new_uuid() -> str:
    """Generate a UUID4 string."""
    return str(uuid.uuid4())


def new_handle_url() -> str:
    """Generate an ephemeral object URL for a playback handle."""
    return f"blob:driveplayer/{new_uuid()}"


def resolve_identifier(text: str) -> Optional[str]:
    """
    Extract a Drive identifier from a link or return a bare identifier.

    Accepts:
      - https://drive.google.com/drive/folders/<id>
      - https://drive.google.com/file/d/<id>/view
      - https://drive.google.com/open?id=<id>
      - <id> (letters, digits, '-' and '_', longer than 10 characters)

    Returns None when nothing matches.
    """
    if not isinstance(text, str):
        return None
    s = text.strip()
    if not s:
        return None

    for pattern in _URL_ID_RES:
        match = pattern.search(s)
        if match:
            return _accept(match.group(1))

    return _accept(s)


def _accept(candidate: str) -> Optional[str]:
    # Ids pulled out of links obey the bare-id rule too, so resolving an
    # output again yields the same identifier.
    if _BARE_ID_RE.match(candidate) and len(candidate) >= _MIN_BARE_ID_LENGTH:
        return candidate
    return None
