"""Runtime settings for driveplayer, loaded from DRIVEPLAYER_* variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from driveplayer.errors import InvalidInputError

ENV_PREFIX = "DRIVEPLAYER_"

DEFAULT_DATA_DIR = "~/.driveplayer"
DEFAULT_SCOPES: tuple[str, ...] = (
    "openid",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
    "https://www.googleapis.com/auth/drive.readonly",
)


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path(DEFAULT_DATA_DIR).expanduser()
    cache_max_bytes: Optional[int] = None
    max_workers: int = 8
    max_depth: int = 32
    request_timeout: float = 60.0
    chunk_size: int = 8 * 1024 * 1024
    max_retries: int = 3
    retry_delay: float = 1.0
    embed_timeout: float = 10.0
    log_level: str = "WARNING"
    scopes: tuple[str, ...] = DEFAULT_SCOPES

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        """
        Build settings from the environment.

        Unset or empty variables keep their defaults.

        Raises:
            InvalidInputError: if a variable cannot be parsed or is out of range.
        """
        env = os.environ if environ is None else environ

        def raw(name: str) -> Optional[str]:
            value = env.get(ENV_PREFIX + name, "").strip()
            return value or None

        defaults = cls()
        data_dir = raw("DATA_DIR")
        scopes = raw("SCOPES")
        settings = cls(
            data_dir=Path(data_dir).expanduser() if data_dir else defaults.data_dir,
            cache_max_bytes=_parse_int(raw("CACHE_MAX_BYTES"), "CACHE_MAX_BYTES", None),
            max_workers=_parse_int(raw("MAX_WORKERS"), "MAX_WORKERS", defaults.max_workers),
            max_depth=_parse_int(raw("MAX_DEPTH"), "MAX_DEPTH", defaults.max_depth),
            request_timeout=_parse_float(
                raw("REQUEST_TIMEOUT"), "REQUEST_TIMEOUT", defaults.request_timeout
            ),
            chunk_size=_parse_int(raw("CHUNK_SIZE"), "CHUNK_SIZE", defaults.chunk_size),
            max_retries=_parse_int(raw("MAX_RETRIES"), "MAX_RETRIES", defaults.max_retries),
            retry_delay=_parse_float(raw("RETRY_DELAY"), "RETRY_DELAY", defaults.retry_delay),
            embed_timeout=_parse_float(
                raw("EMBED_TIMEOUT"), "EMBED_TIMEOUT", defaults.embed_timeout
            ),
            log_level=(raw("LOG_LEVEL") or defaults.log_level).upper(),
            scopes=(
                tuple(s.strip() for s in scopes.split(",") if s.strip())
                if scopes
                else defaults.scopes
            ),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if self.cache_max_bytes is not None and self.cache_max_bytes <= 0:
            raise InvalidInputError("cache_max_bytes must be positive when set")
        if self.max_workers < 1:
            raise InvalidInputError("max_workers must be >= 1")
        if self.max_depth < 1:
            raise InvalidInputError("max_depth must be >= 1")
        if self.request_timeout <= 0:
            raise InvalidInputError("request_timeout must be positive")
        if self.chunk_size < 1:
            raise InvalidInputError("chunk_size must be >= 1")
        if self.max_retries < 0:
            raise InvalidInputError("max_retries must be >= 0")
        if self.retry_delay < 0:
            raise InvalidInputError("retry_delay must be >= 0")
        if self.embed_timeout < 0:
            raise InvalidInputError("embed_timeout must be >= 0")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise InvalidInputError(
                "Unknown log level", details={"log_level": self.log_level}
            )
        if not self.scopes:
            raise InvalidInputError("scopes must not be empty")

    @property
    def cache_dir(self) -> Path:
        return self.data_dir / "cache"

    @property
    def progress_dir(self) -> Path:
        return self.data_dir / "progress"

    @property
    def client_secrets_file(self) -> Path:
        return self.data_dir / "client_secrets.json"

    @property
    def token_file(self) -> Path:
        return self.data_dir / "token.json"


def configure_logging(level: str = "WARNING") -> None:
    """Install a basic stderr handler. Only applications should call this."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _parse_int(value: Optional[str], name: str, default: Optional[int]) -> Optional[int]:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise InvalidInputError(
            f"{ENV_PREFIX}{name} must be an integer",
            details={"value": value},
            cause=exc,
        ) from exc


def _parse_float(value: Optional[str], name: str, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise InvalidInputError(
            f"{ENV_PREFIX}{name} must be a number",
            details={"value": value},
            cause=exc,
        ) from exc
