import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

from driveplayer.models import CachedVideo
from driveplayer.store import BlobStore, DirectoryBlobStore, InMemoryBlobStore

T0 = datetime(2025, 1, 1, tzinfo=timezone.utc)
T1 = datetime(2025, 1, 2, tzinfo=timezone.utc)


def _record(file_id: str = "V1", content: bytes = b"\x00\x01video") -> CachedVideo:
    return CachedVideo(file_id=file_id, file_name=f"{file_id}.mp4", content=content, downloaded_at=T0)


class _BlobStoreContract:
    def make_store(self) -> BlobStore:
        raise NotImplementedError

    def test_put_get_returns_identical_bytes(self) -> None:
        store = self.make_store()
        store.put(_record())
        record = store.get("V1")
        self.assertIsNotNone(record)
        self.assertEqual(record.content, b"\x00\x01video")
        self.assertEqual(record.file_name, "V1.mp4")
        self.assertEqual(record.downloaded_at, T0)

    def test_put_overwrites(self) -> None:
        store = self.make_store()
        store.put(_record(content=b"old"))
        store.put(_record(content=b"new"))
        self.assertEqual(store.get("V1").content, b"new")
        self.assertEqual(len(store.list_info()), 1)

    def test_delete_is_idempotent(self) -> None:
        store = self.make_store()
        store.put(_record())
        store.delete("V1")
        store.delete("V1")
        self.assertIsNone(store.get("V1"))
        self.assertEqual(store.keys(), set())

    def test_list_info_and_keys(self) -> None:
        store = self.make_store()
        store.put(_record("A", b"12"))
        store.put(_record("B", b"345"))
        self.assertEqual(store.keys(), {"A", "B"})
        sizes = {info.file_id: info.size for info in store.list_info()}
        self.assertEqual(sizes, {"A": 2, "B": 3})

    def test_touch_updates_last_accessed(self) -> None:
        store = self.make_store()
        store.put(_record())
        store.touch("V1", T1)
        store.touch("missing", T1)
        self.assertEqual(store.get("V1").last_accessed, T1)
        self.assertEqual(store.list_info()[0].recency, T1)


class TestInMemoryBlobStore(_BlobStoreContract, unittest.TestCase):
    def make_store(self) -> BlobStore:
        return InMemoryBlobStore()


class TestDirectoryBlobStore(_BlobStoreContract, unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.directory = Path(self._tmp.name) / "cache"

    def make_store(self) -> BlobStore:
        return DirectoryBlobStore(self.directory)

    def test_survives_reopen(self) -> None:
        self.make_store().put(_record())
        self.assertEqual(DirectoryBlobStore(self.directory).get("V1").content, b"\x00\x01video")

    def test_content_without_metadata_is_absent(self) -> None:
        self.directory.mkdir(parents=True)
        (self.directory / "V1.bin").write_bytes(b"partial")
        store = self.make_store()
        self.assertIsNone(store.get("V1"))
        self.assertEqual(store.keys(), set())

    def test_corrupt_metadata_is_ignored(self) -> None:
        store = self.make_store()
        store.put(_record())
        (self.directory / "V1.json").write_text("{broken", encoding="utf-8")
        with self.assertLogs("driveplayer.store.blob_store", level="WARNING"):
            self.assertEqual(store.list_info(), [])

    def test_list_info_on_missing_directory(self) -> None:
        self.assertEqual(self.make_store().list_info(), [])


if __name__ == "__main__":
    unittest.main()
