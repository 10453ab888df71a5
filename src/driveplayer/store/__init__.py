"""Storage backends for driveplayer."""

from __future__ import annotations

from .blob_store import BlobStore, DirectoryBlobStore, InMemoryBlobStore
from .kv_store import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "BlobStore",
    "InMemoryBlobStore",
    "DirectoryBlobStore",
]
