import io
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

from driveplayer.cli import build_parser, main
from driveplayer.config import Settings
from driveplayer.errors import (
    ApiError,
    InvalidInputError,
    NotFoundError,
    StorageError,
    UnauthorizedError,
)
from driveplayer.models import CachedVideo
from driveplayer.store import DirectoryBlobStore


class TestCliParser(unittest.TestCase):
    def test_subcommands(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["tree", "https://drive.google.com/drive/folders/x"])
        self.assertEqual(args.command, "tree")
        args = parser.parse_args(["cache", "delete", "V1"])
        self.assertEqual((args.command, args.cache_command, args.file_id), ("cache", "delete", "V1"))
        args = parser.parse_args(["progress", "clear", "--folder", "F1"])
        self.assertEqual(args.folder, "F1")

    def test_command_is_required(self) -> None:
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                build_parser().parse_args([])


class TestCliMain(unittest.TestCase):
    def test_exit_codes(self) -> None:
        cases = [
            (InvalidInputError("bad"), 2),
            (UnauthorizedError("no"), 3),
            (NotFoundError("gone"), 4),
            (ApiError("later"), 5),
            (StorageError("disk"), 1),
        ]
        for error, code in cases:
            with patch("driveplayer.cli._dispatch", side_effect=error):
                with redirect_stderr(io.StringIO()) as err:
                    self.assertEqual(main(["logout"]), code)
            self.assertIn(str(error), err.getvalue())

    def test_cache_commands_work_offline(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            DirectoryBlobStore(Settings(data_dir=Path(tmp)).cache_dir).put(
                CachedVideo(
                    file_id="V1",
                    file_name="intro.mp4",
                    content=b"x" * 2048,
                    downloaded_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
                )
            )
            with patch.dict("os.environ", {"DRIVEPLAYER_DATA_DIR": tmp}):
                with redirect_stdout(io.StringIO()) as out:
                    self.assertEqual(main(["cache", "list"]), 0)
                self.assertEqual(out.getvalue(), "V1\t2.0 KB\tintro.mp4\n")

                with redirect_stdout(io.StringIO()) as out:
                    self.assertEqual(main(["cache", "size"]), 0)
                self.assertEqual(out.getvalue(), "2.0 KB\n")

                with redirect_stdout(io.StringIO()):
                    self.assertEqual(main(["cache", "delete", "V1"]), 0)
                with redirect_stdout(io.StringIO()) as out:
                    main(["cache", "size"])
                self.assertEqual(out.getvalue(), "0 B\n")


if __name__ == "__main__":
    unittest.main()
