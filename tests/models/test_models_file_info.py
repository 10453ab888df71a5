import unittest
from datetime import datetime, timezone

from driveplayer.models import FileInfo


class TestFileInfo(unittest.TestCase):
    def test_file_info_required_fields(self) -> None:
        info = FileInfo(file_id="F1", name="n", mime_type="text/plain")
        self.assertEqual(info.parents, [])
        self.assertFalse(info.trashed)
        self.assertIsNone(info.modified_time)
        self.assertIsNone(info.size)
        self.assertIsNone(info.web_view_link)

    def test_file_info_optional_fields(self) -> None:
        dt = datetime(2025, 1, 1, tzinfo=timezone.utc)
        info = FileInfo(
            file_id="F1",
            name="lesson.mp4",
            mime_type="video/mp4",
            parents=["P1"],
            trashed=True,
            modified_time=dt,
            size=123,
            thumbnail_link="https://thumb",
        )
        self.assertTrue(info.trashed)
        self.assertEqual(info.modified_time, dt)
        self.assertEqual(info.size, 123)
        self.assertEqual(info.thumbnail_link, "https://thumb")

    def test_is_complete(self) -> None:
        self.assertTrue(FileInfo(file_id="F", name="n", mime_type="m").is_complete())
        self.assertFalse(FileInfo(file_id="", name="n", mime_type="m").is_complete())
        self.assertFalse(FileInfo(file_id="F", name="", mime_type="m").is_complete())
        self.assertFalse(FileInfo(file_id="F", name="n", mime_type="").is_complete())


if __name__ == "__main__":
    unittest.main()
