"""Where the OAuth client secrets and the user's token live."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from driveplayer.config import Settings

SUPPORTED_KINDS: tuple[str, ...] = ("oauth",)


@dataclass(slots=True, frozen=True)
class AuthInfo:
    """
    Locations used by the installed-app OAuth flow.

    Attributes:
        client_secrets_file: OAuth client JSON downloaded from the Cloud console.
        token_file: Authorized-user JSON written after a successful login.
        kind: Only "oauth" (installed-app flow) is supported.
    """

    client_secrets_file: str
    token_file: str
    kind: str = "oauth"

    def __post_init__(self) -> None:
        if self.kind not in SUPPORTED_KINDS:
            raise ValueError(f"Unsupported auth kind: {self.kind!r}")
        for name in ("client_secrets_file", "token_file"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"AuthInfo.{name} must be a non-empty string")

    @classmethod
    def from_settings(cls, settings: Settings) -> AuthInfo:
        return cls(
            client_secrets_file=str(settings.client_secrets_file),
            token_file=str(settings.token_file),
        )
