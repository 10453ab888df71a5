"""Public auth exports for driveplayer."""

from __future__ import annotations

from .auth_info import AuthInfo
from .oauth_client import OAuthClient, build_drive_service
from .session import (
    Session,
    SessionClaims,
    decode_claims,
    fetch_user_claims,
    logout,
    revoke_token,
)

__all__ = [
    "AuthInfo",
    "OAuthClient",
    "build_drive_service",
    "Session",
    "SessionClaims",
    "decode_claims",
    "fetch_user_claims",
    "revoke_token",
    "logout",
]
