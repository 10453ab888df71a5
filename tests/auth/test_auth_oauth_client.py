import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from driveplayer.auth import AuthInfo, OAuthClient
from driveplayer.errors import InvalidInputError, UnauthorizedError

SCOPES = ["https://www.googleapis.com/auth/drive.readonly"]


def _auth_info(tmp_path: Path) -> AuthInfo:
    return AuthInfo(
        client_secrets_file=str(tmp_path / "client_secrets.json"),
        token_file=str(tmp_path / "token.json"),
    )


def _write_token(tmp_path: Path, **extra) -> Path:
    token_file = tmp_path / "token.json"
    token_payload = {
        "token": "fake-token",
        "refresh_token": "fake-refresh-token",
        "token_uri": "https://oauth2.googleapis.com/token",
        "client_id": "fake-client-id",
        "client_secret": "fake-client-secret",
        "scopes": SCOPES,
        "type": "authorized_user",
        **extra,
    }
    token_file.write_text(json.dumps(token_payload), encoding="utf-8")
    return token_file


class TestOAuthClient(unittest.TestCase):
    def test_get_credentials_loads_token_file_without_refresh(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            tmp_path = Path(tmp)
            _write_token(tmp_path)

            client = OAuthClient(_auth_info(tmp_path))
            creds = client.get_credentials(scopes=SCOPES, ensure_valid=False)

            # Credentials object should be created and have a refresh_token.
            self.assertTrue(hasattr(creds, "refresh_token"))
            self.assertEqual(creds.refresh_token, "fake-refresh-token")

    def test_refresh_failure_is_unauthorized(self) -> None:
        from google.auth.exceptions import RefreshError

        with tempfile.TemporaryDirectory() as tmp:
            tmp_path = Path(tmp)
            _write_token(tmp_path, expiry="2000-01-01T00:00:00Z")
            client = OAuthClient(_auth_info(tmp_path))

            with patch(
                "google.oauth2.credentials.Credentials.refresh",
                side_effect=RefreshError("revoked"),
            ):
                with self.assertRaises(UnauthorizedError):
                    client.get_credentials(scopes=SCOPES, interactive=False)

    def test_corrupt_token_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            tmp_path = Path(tmp)
            (tmp_path / "token.json").write_text("{not json", encoding="utf-8")
            client = OAuthClient(_auth_info(tmp_path))
            with self.assertRaises(UnauthorizedError):
                client.get_credentials(scopes=SCOPES)

    def test_non_interactive_without_token_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            client = OAuthClient(_auth_info(Path(tmp)))
            with self.assertRaises(UnauthorizedError):
                client.get_credentials(scopes=SCOPES, interactive=False)

    def test_scopes_are_validated(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            client = OAuthClient(_auth_info(Path(tmp)))
            with self.assertRaises(InvalidInputError):
                client.get_credentials(scopes=[])
            with self.assertRaises(InvalidInputError):
                client.get_credentials(scopes="drive")

    def test_forget_credentials_removes_token_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            tmp_path = Path(tmp)
            token_file = _write_token(tmp_path)

            client = OAuthClient(_auth_info(tmp_path))
            client.forget_credentials()
            self.assertFalse(token_file.exists())

            # Forgetting twice is fine.
            client.forget_credentials()


if __name__ == "__main__":
    unittest.main()
