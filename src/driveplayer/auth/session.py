"""Explicit per-login session context."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import urlencode

from driveplayer.errors import InvalidInputError, NetworkError, UnauthorizedError

logger = logging.getLogger(__name__)

REVOKE_URL = "https://oauth2.googleapis.com/revoke"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


@dataclass(frozen=True, slots=True)
class SessionClaims:
    """Basic profile claims decoded from the ID token."""

    subject: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None
    expires_at: Optional[datetime] = None
    issued_at: Optional[datetime] = None


@dataclass(frozen=True)
class Session:
    """
    Authentication state for one login.

    Created at login and passed explicitly to every call that needs to talk
    to Drive; torn down by logout(), which revokes the access token.
    """

    access_token: str
    credential: Optional[str] = None
    claims: SessionClaims = field(default_factory=SessionClaims)

    def __post_init__(self) -> None:
        if not isinstance(self.access_token, str) or not self.access_token.strip():
            raise InvalidInputError("Session.access_token must be a non-empty string")

    @classmethod
    def from_tokens(cls, access_token: str, id_token: Optional[str] = None) -> Session:
        claims = decode_claims(id_token) if id_token else SessionClaims()
        return cls(access_token=access_token, credential=id_token, claims=claims)

    @classmethod
    def from_credentials(cls, credentials: Any) -> Session:
        """Build a session from google.oauth2.credentials.Credentials."""
        token = getattr(credentials, "token", None)
        if not token:
            raise UnauthorizedError("Credentials carry no access token")
        return cls.from_tokens(token, getattr(credentials, "id_token", None))

    @property
    def user_id(self) -> Optional[str]:
        """Stable key for per-user local state (email, else subject)."""
        return self.claims.email or self.claims.subject

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.claims.expires_at is None:
            return False
        current = now or datetime.now(timezone.utc)
        return current >= self.claims.expires_at

    def google_credentials(self):
        """Bearer-only google.oauth2.credentials.Credentials for this session."""
        from google.oauth2.credentials import Credentials

        return Credentials(token=self.access_token)


def decode_claims(id_token: str) -> SessionClaims:
    """Decode profile claims from an ID token without verifying its signature."""
    from google.auth import jwt

    try:
        payload = jwt.decode(id_token, verify=False)
    except ValueError as exc:
        raise InvalidInputError("Malformed ID token", cause=exc) from exc

    return _claims_from_payload(payload)


def fetch_user_claims(credentials: Any, *, timeout: float = 10.0) -> SessionClaims:
    """
    Ask Google's userinfo endpoint for the profile behind `credentials`.

    Needed when credentials were loaded from a token file, which does not
    keep the ID token.
    """
    from google.auth.transport.requests import AuthorizedSession
    from requests import RequestException

    http = AuthorizedSession(credentials)
    try:
        response = http.get(USERINFO_URL, timeout=timeout)
    except RequestException as exc:
        raise NetworkError("Userinfo request failed", cause=exc) from exc
    finally:
        http.close()

    if response.status_code == 401:
        raise UnauthorizedError("Access token was rejected by userinfo")
    if response.status_code != 200:
        raise UnauthorizedError(
            "Userinfo request failed",
            details={"status_code": response.status_code},
        )
    expiry = getattr(credentials, "expiry", None)
    return _claims_from_payload(
        response.json(),
        expires_at=_as_utc(expiry) if isinstance(expiry, datetime) else None,
    )


def revoke_token(token: str, *, timeout: float = 10.0, request: Any = None) -> None:
    """
    Revoke an OAuth token at Google.

    Raises:
        NetworkError: if the request could not be sent.
        UnauthorizedError: if Google rejected the revocation.
    """
    from google.auth import exceptions as google_exceptions
    from google.auth.transport.requests import Request

    req = request or Request()
    try:
        response = req(
            url=REVOKE_URL,
            method="POST",
            body=urlencode({"token": token}),
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=timeout,
        )
    except google_exceptions.TransportError as exc:
        raise NetworkError("Token revocation request failed", cause=exc) from exc

    if response.status != 200:
        raise UnauthorizedError(
            "Token revocation was rejected",
            details={"status_code": response.status},
        )


def logout(session: Optional[Session], *, request: Any = None) -> None:
    """Best-effort revoke; failures are logged and never abort the logout."""
    if session is None:
        return
    try:
        revoke_token(session.access_token, request=request)
    except (NetworkError, UnauthorizedError) as exc:
        logger.warning("Failed to revoke token during logout: %s", exc)


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _as_utc(value: datetime) -> datetime:
    # google-auth keeps `expiry` as a naive UTC datetime.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _opt_epoch(value: Any) -> Optional[datetime]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    return None


def _claims_from_payload(
    payload: dict[str, Any],
    *,
    expires_at: Optional[datetime] = None,
) -> SessionClaims:
    return SessionClaims(
        subject=_opt_str(payload.get("sub")),
        email=_opt_str(payload.get("email")),
        name=_opt_str(payload.get("name")),
        picture=_opt_str(payload.get("picture")),
        expires_at=_opt_epoch(payload.get("exp")) or expires_at,
        issued_at=_opt_epoch(payload.get("iat")),
    )
