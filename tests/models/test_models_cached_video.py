import unittest
from datetime import datetime, timezone

from driveplayer.models import CachedVideo

T0 = datetime(2025, 1, 1, tzinfo=timezone.utc)
T1 = datetime(2025, 1, 2, tzinfo=timezone.utc)


class TestCachedVideo(unittest.TestCase):
    def test_info_drops_content(self) -> None:
        record = CachedVideo(file_id="V1", file_name="a.mp4", content=b"12345", downloaded_at=T0)
        info = record.info()
        self.assertEqual(record.size, 5)
        self.assertEqual(info.size, 5)
        self.assertEqual(info.mime_type, "video/mp4")
        self.assertFalse(hasattr(info, "content"))

    def test_recency_prefers_last_access(self) -> None:
        record = CachedVideo(file_id="V1", file_name="a", content=b"", downloaded_at=T0)
        self.assertEqual(record.info().recency, T0)
        touched = CachedVideo(
            file_id="V1", file_name="a", content=b"", downloaded_at=T0, last_accessed=T1
        )
        self.assertEqual(touched.info().recency, T1)


if __name__ == "__main__":
    unittest.main()
