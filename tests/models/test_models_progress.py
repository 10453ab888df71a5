import unittest
from datetime import datetime, timezone

from driveplayer.models import ProgressData, VideoProgress, WatchStatus

T0 = datetime(2025, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
T1 = datetime(2025, 1, 2, 10, 0, 0, tzinfo=timezone.utc)


class TestProgressModels(unittest.TestCase):
    def test_status_wire_values(self) -> None:
        self.assertEqual(WatchStatus.NOT_STARTED.value, "not-started")
        self.assertEqual(WatchStatus.IN_PROGRESS.value, "in-progress")
        self.assertEqual(WatchStatus.COMPLETED.value, "completed")

    def test_video_progress_to_dict_uses_camel_case(self) -> None:
        record = VideoProgress(
            file_id="V1",
            file_name="a.mp4",
            folder_id="F1",
            status=WatchStatus.COMPLETED,
            last_watched=T1,
            created_at=T0,
            completed_at=T1,
        )
        data = record.to_dict()
        self.assertEqual(data["fileId"], "V1")
        self.assertEqual(data["folderId"], "F1")
        self.assertEqual(data["status"], "completed")
        self.assertEqual(data["createdAt"], "2025-01-01T10:00:00.000000Z")
        self.assertIn("completedAt", data)
        self.assertEqual(VideoProgress.from_dict(data), record)

    def test_completed_at_is_optional(self) -> None:
        record = VideoProgress(
            file_id="V1",
            file_name="a.mp4",
            folder_id="F1",
            status=WatchStatus.IN_PROGRESS,
            last_watched=T0,
            created_at=T0,
        )
        self.assertNotIn("completedAt", record.to_dict())

    def test_envelope_from_dict(self) -> None:
        data = {
            "userId": "u@example.com",
            "updatedAt": "2025-01-02T10:00:00Z",
            "lastVideoFileId": "V1",
            "videos": {
                "V1": {
                    "fileId": "V1",
                    "fileName": "a.mp4",
                    "folderId": "F1",
                    "status": "in-progress",
                    "lastWatched": "2025-01-02T10:00:00Z",
                    "createdAt": "2025-01-01T10:00:00Z",
                }
            },
        }
        envelope = ProgressData.from_dict(data)
        self.assertEqual(envelope.user_id, "u@example.com")
        self.assertEqual(envelope.updated_at, T1)
        self.assertIs(envelope.videos["V1"].status, WatchStatus.IN_PROGRESS)
        self.assertEqual(envelope.last_video_file_id, "V1")
        self.assertIsNone(envelope.last_folder_id)

    def test_envelope_rejects_malformed_input(self) -> None:
        with self.assertRaises(KeyError):
            ProgressData.from_dict({"videos": {}})
        with self.assertRaises(TypeError):
            ProgressData.from_dict(
                {"userId": "u", "updatedAt": "2025-01-01T00:00:00Z", "videos": []}
            )
        with self.assertRaises(ValueError):
            ProgressData.from_dict(
                {
                    "userId": "u",
                    "updatedAt": "2025-01-01T00:00:00Z",
                    "videos": {
                        "V": {
                            "fileId": "V",
                            "status": "paused",
                            "lastWatched": "2025-01-01T00:00:00Z",
                            "createdAt": "2025-01-01T00:00:00Z",
                        }
                    },
                }
            )


if __name__ == "__main__":
    unittest.main()
