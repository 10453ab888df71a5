"""OAuth installed-app login and Drive service construction."""

from __future__ import annotations

import logging
import os
from typing import Any, Optional, Sequence

from driveplayer.errors import InvalidInputError, UnauthorizedError

from .auth_info import AuthInfo

logger = logging.getLogger(__name__)


class OAuthClient:
    """
    Obtain Google user credentials for driveplayer.

    Policy:
        1. A stored token is loaded from `token_file`.
        2. An expired stored token is refreshed (and saved) when it has a
           refresh token.
        3. Otherwise the browser-based installed-app flow runs, unless
           `interactive=False`, in which case UnauthorizedError is raised.
    """

    def __init__(self, auth_info: AuthInfo) -> None:
        if auth_info.kind != "oauth":
            raise InvalidInputError("OAuthClient requires AuthInfo(kind='oauth')")
        self._auth_info = auth_info

    @property
    def token_file(self) -> str:
        return self._auth_info.token_file

    def get_credentials(
        self,
        scopes: Sequence[str],
        ensure_valid: bool = True,
        *,
        interactive: bool = True,
    ):
        """
        Return google.oauth2.credentials.Credentials for `scopes`.

        With ensure_valid=False a stored token is returned as loaded,
        without refreshing it.

        Raises:
            InvalidInputError: if scopes is empty or malformed.
            UnauthorizedError: on load/refresh/flow failures, or when no
                usable token exists and interactive is False.
        """
        scope_list = _check_scopes(scopes)

        creds = self._load_stored(scope_list)
        if creds is not None:
            if not ensure_valid:
                return creds
            if not creds.valid and creds.refresh_token:
                self._refresh(creds)
            if creds.valid:
                return creds

        if not interactive:
            raise UnauthorizedError(
                "No valid stored credentials; log in first",
                details={"token_file": self.token_file},
            )
        return self._run_flow(scope_list)

    def forget_credentials(self) -> None:
        """Delete the stored token file, if any."""
        try:
            os.remove(self.token_file)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise UnauthorizedError(
                "Failed to remove OAuth token file",
                details={"token_file": self.token_file},
                cause=exc,
            ) from exc
        logger.info("Removed stored OAuth token %s", self.token_file)

    # ----------------------------
    # Internals
    # ----------------------------
    def _load_stored(self, scopes: list[str]) -> Optional[Any]:
        if not os.path.exists(self.token_file):
            return None
        from google.oauth2.credentials import Credentials

        try:
            return Credentials.from_authorized_user_file(self.token_file, scopes=scopes)
        except (OSError, ValueError) as exc:
            raise UnauthorizedError(
                "Failed to load token_file",
                details={"token_file": self.token_file},
                cause=exc,
            ) from exc

    def _refresh(self, creds: Any) -> None:
        from google.auth.exceptions import GoogleAuthError
        from google.auth.transport.requests import Request

        try:
            creds.refresh(Request())
        except GoogleAuthError as exc:
            raise UnauthorizedError(
                "Failed to refresh OAuth credentials",
                details={"token_file": self.token_file},
                cause=exc,
            ) from exc
        self._save(creds)
        logger.info("Refreshed OAuth credentials")

    def _run_flow(self, scopes: list[str]) -> Any:
        from google_auth_oauthlib.flow import InstalledAppFlow

        client_secrets = self._auth_info.client_secrets_file
        try:
            flow = InstalledAppFlow.from_client_secrets_file(client_secrets, scopes=scopes)
            creds = flow.run_local_server(port=0)
        except Exception as exc:
            raise UnauthorizedError(
                "OAuth authorization flow failed",
                details={"client_secrets_file": client_secrets},
                cause=exc,
            ) from exc
        self._save(creds)
        logger.info("OAuth authorization completed")
        return creds

    def _save(self, creds: Any) -> None:
        token_dir = os.path.dirname(self.token_file)
        try:
            if token_dir:
                os.makedirs(token_dir, exist_ok=True)
            with open(self.token_file, "w", encoding="utf-8") as f:
                f.write(creds.to_json())
        except OSError as exc:
            raise UnauthorizedError(
                "Failed to save OAuth token file",
                details={"token_file": self.token_file},
                cause=exc,
            ) from exc


def _check_scopes(scopes: Sequence[str]) -> list[str]:
    if isinstance(scopes, str) or not scopes:
        raise InvalidInputError("scopes must be a non-empty sequence of strings")
    if not all(isinstance(s, str) and s.strip() for s in scopes):
        raise InvalidInputError("scopes must be a non-empty sequence of strings")
    return list(scopes)


def build_drive_service(credentials: Any, *, timeout: float):
    """
    Build a Drive v3 resource whose requests time out after `timeout` seconds.

    Each call gets its own httplib2 transport; callers keep one service per
    thread.
    """
    import google_auth_httplib2
    import httplib2
    from googleapiclient.discovery import build

    http = google_auth_httplib2.AuthorizedHttp(
        credentials,
        http=httplib2.Http(timeout=timeout),
    )
    try:
        return build("drive", "v3", http=http, cache_discovery=False)
    except Exception as exc:
        raise UnauthorizedError("Failed to build Drive service", cause=exc) from exc
