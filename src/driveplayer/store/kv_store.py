"""Small key-value interface for durable JSON state."""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from driveplayer.errors import InvalidInputError, StorageError

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStore(ABC):
    """JSON-serializable values under string keys."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store value, replacing any previous one."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key. Absent keys are ignored."""


class InMemoryKeyValueStore(KeyValueStore):
    """Keeps values serialized as JSON text, like the file-backed store."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError) as exc:
            raise StorageError("Value is not JSON-serializable", cause=exc) from exc

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def raw(self, key: str) -> Optional[str]:
        return self._data.get(key)


class JsonFileKeyValueStore(KeyValueStore):
    """One `<key>.json` file per key inside `directory`."""

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._dir = Path(directory)

    def get(self, key: str) -> Optional[Any]:
        path = self._path(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as exc:
            raise StorageError(
                "Stored value is not valid JSON",
                details={"path": str(path)},
                cause=exc,
            ) from exc
        except OSError as exc:
            logger.error("Failed to read %s: %s", path, exc)
            raise StorageError(
                "Failed to read stored value",
                details={"path": str(path)},
                cause=exc,
            ) from exc

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        try:
            payload = json.dumps(value, ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as exc:
            raise StorageError("Value is not JSON-serializable", cause=exc) from exc
        try:
            atomic_write(path, payload.encode("utf-8"))
        except OSError as exc:
            logger.error("Failed to write %s: %s", path, exc)
            raise StorageError(
                "Failed to write stored value",
                details={"path": str(path)},
                cause=exc,
            ) from exc

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            logger.error("Failed to delete %s: %s", path, exc)
            raise StorageError(
                "Failed to delete stored value",
                details={"path": str(path)},
                cause=exc,
            ) from exc

    def _path(self, key: str) -> Path:
        return self._dir / f"{validate_key(key)}.json"


def validate_key(key: str) -> str:
    """Keys become file names, so only a safe character set is allowed."""
    if not isinstance(key, str) or not _KEY_RE.match(key) or key in (".", ".."):
        raise InvalidInputError("Invalid storage key", details={"key": key})
    return key


def atomic_write(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise
