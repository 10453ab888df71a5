import argparse
import os
import tempfile
import unittest
from pathlib import Path

from driveplayer import DrivePlayerManager, Session, Settings
from driveplayer.auth import AuthInfo, OAuthClient, fetch_user_claims
from driveplayer.player import PlaybackState
from driveplayer.store import InMemoryKeyValueStore


def _env(name: str) -> str:
    value = os.environ.get(name, "").strip()
    if not value:
        raise unittest.SkipTest(f"Missing env var: {name}")
    return value


class TestGoogleDriveIntegration(unittest.TestCase):
    """
    Integration test with real Google Drive (read-only).

    Required env vars:
        - DRIVEPLAYER_IT_CLIENT_SECRETS: path to OAuth client secrets json
        - DRIVEPLAYER_IT_TOKEN_FILE: path to an authorized token json
        - DRIVEPLAYER_IT_FOLDER: Drive folder link or id holding at least one video

    Optional:
        - DRIVEPLAYER_IT_DOWNLOAD=1: also download the first video
    """

    @classmethod
    def setUpClass(cls) -> None:
        cls.client_secrets = _env("DRIVEPLAYER_IT_CLIENT_SECRETS")
        cls.token_file = _env("DRIVEPLAYER_IT_TOKEN_FILE")
        cls.folder = _env("DRIVEPLAYER_IT_FOLDER")

        cls.auth_info = AuthInfo(
            client_secrets_file=cls.client_secrets,
            token_file=cls.token_file,
        )

    def _session(self, settings: Settings) -> Session:
        creds = OAuthClient(self.auth_info).get_credentials(settings.scopes, interactive=False)
        return Session(access_token=creds.token, claims=fetch_user_claims(creds))

    def test_browse_and_watch(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            settings = Settings(data_dir=Path(tmp))
            mgr = DrivePlayerManager(settings, kv=InMemoryKeyValueStore())

            mgr.login(self._session(settings))
            tree = mgr.open_folder(self.folder)
            self.assertTrue(tree.is_folder)

            videos = [node for node in tree.iter_nodes() if node.is_video]
            if not videos:
                self.skipTest("Folder holds no videos")

            player = mgr.open_video(videos[0])
            self.assertIs(player.state, PlaybackState.REMOTE_EMBED)
            self.assertEqual(mgr.progress.get_total_count(), 1)

            if os.environ.get("DRIVEPLAYER_IT_DOWNLOAD", "").strip() == "1":
                self.assertTrue(player.request_offline(mgr.session), player.error_message)
                self.assertTrue(mgr.cache.is_cached(videos[0].id))
                player.mark_complete()
                self.assertTrue(mgr.progress.is_completed(videos[0].id))

            player.close()


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose unittest output",
    )
    return parser.parse_args()


if __name__ == "__main__":
    args = _parse_args()
    unittest.main(verbosity=2 if args.verbose else 1)
