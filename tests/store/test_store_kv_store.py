import tempfile
import unittest
from pathlib import Path

from driveplayer.errors import InvalidInputError, StorageError
from driveplayer.store import InMemoryKeyValueStore, JsonFileKeyValueStore
from driveplayer.store.kv_store import validate_key


class TestInMemoryKeyValueStore(unittest.TestCase):
    def test_set_get_delete(self) -> None:
        kv = InMemoryKeyValueStore()
        self.assertIsNone(kv.get("k"))
        kv.set("k", {"a": [1, 2]})
        self.assertEqual(kv.get("k"), {"a": [1, 2]})
        self.assertEqual(kv.raw("k"), '{"a": [1, 2]}')
        kv.delete("k")
        kv.delete("k")
        self.assertIsNone(kv.get("k"))

    def test_values_are_copies(self) -> None:
        kv = InMemoryKeyValueStore()
        value = {"a": 1}
        kv.set("k", value)
        value["a"] = 2
        self.assertEqual(kv.get("k"), {"a": 1})

    def test_unserializable_value(self) -> None:
        with self.assertRaises(StorageError):
            InMemoryKeyValueStore().set("k", {"a": object()})


class TestJsonFileKeyValueStore(unittest.TestCase):
    def test_round_trip_creates_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            directory = Path(tmp) / "nested" / "progress"
            kv = JsonFileKeyValueStore(directory)
            kv.set("driveplayer_progress", {"userId": "u"})

            self.assertTrue((directory / "driveplayer_progress.json").is_file())
            self.assertEqual(JsonFileKeyValueStore(directory).get("driveplayer_progress"), {"userId": "u"})

            kv.delete("driveplayer_progress")
            self.assertIsNone(kv.get("driveplayer_progress"))
            kv.delete("driveplayer_progress")

    def test_corrupt_file_raises_storage_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            Path(tmp, "k.json").write_text("{not json", encoding="utf-8")
            with self.assertRaises(StorageError):
                JsonFileKeyValueStore(tmp).get("k")

    def test_no_temp_files_left_behind(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            kv = JsonFileKeyValueStore(tmp)
            kv.set("k", 1)
            kv.set("k", 2)
            self.assertEqual([p.name for p in Path(tmp).iterdir()], ["k.json"])
            self.assertEqual(kv.get("k"), 2)


class TestValidateKey(unittest.TestCase):
    def test_rejects_path_like_keys(self) -> None:
        for key in ("", "..", "a/b", "../x", "a b"):
            with self.assertRaises(InvalidInputError):
                validate_key(key)

    def test_accepts_drive_ids(self) -> None:
        self.assertEqual(validate_key("1AbC_d-E.f"), "1AbC_d-E.f")


if __name__ == "__main__":
    unittest.main()
