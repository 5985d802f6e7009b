"""
Application settings for playout-bootstrap.

This module defines every recognized bootstrap option using Pydantic
BaseSettings. Build-time options pin the release; run-time options form
the first-run initialization profile and the listen address.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUPPORTED_PLATFORMS = ("x86_64-unknown-linux-musl",)

MailTls = Literal["starttls", "tls", "none"]


class ListenAddress(BaseModel):
    """Host/port pair the server binds to."""

    host: str = "0.0.0.0"
    port: int = Field(default=8787, ge=1, le=65535)

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class MailRelay(BaseModel):
    """Outbound mail relay used by the server for notifications."""

    host: str
    user: str
    password: SecretStr = SecretStr("")
    port: int = Field(default=587, ge=1, le=65535)
    tls: MailTls = "starttls"


class InitProfile(BaseModel):
    """
    Parameters applied once, when persistent state is first created.

    The server persists them in its own database; this layer never
    re-applies them after the state marker exists.
    """

    admin_username: str
    admin_password: SecretStr
    admin_email: str
    storage_dir: Path
    playlist_dir: Path
    public_dir: Path
    log_dir: Path
    mail: MailRelay

    @property
    def directories(self) -> list[Path]:
        return [self.storage_dir, self.playlist_dir, self.public_dir, self.log_dir]


class PlayoutSettings(BaseSettings):
    """Main bootstrap settings using Pydantic BaseSettings."""

    # Release pinning (build time)
    binary_name: str = Field(default="ffplayout", alias="PLAYOUT_BINARY_NAME")
    version: str = Field(default="0.25.3", alias="PLAYOUT_VERSION")
    platform: str = Field(default="x86_64-unknown-linux-musl", alias="PLAYOUT_PLATFORM")
    release_base_url: str = Field(
        default="https://github.com/ffplayout/ffplayout/releases/download",
        alias="PLAYOUT_RELEASE_BASE_URL",
    )
    archive_dir: Path = Field(default=Path("/"), alias="PLAYOUT_ARCHIVE_DIR")
    archive_sha256: str | None = Field(default=None, alias="PLAYOUT_ARCHIVE_SHA256")
    scratch_dir: Path = Field(default=Path("/tmp/playout-bootstrap"), alias="PLAYOUT_SCRATCH_DIR")
    bin_dir: Path = Field(default=Path("/usr/bin"), alias="PLAYOUT_BIN_DIR")
    assets_dir: Path = Field(default=Path("/usr/share/ffplayout"), alias="PLAYOUT_ASSETS_DIR")
    fetch_timeout: int = Field(default=60, ge=1, alias="PLAYOUT_FETCH_TIMEOUT")

    # Persistent state (run time)
    db_dir: Path = Field(default=Path("/db"), alias="PLAYOUT_DB_DIR")
    marker_name: str = Field(default="ffplayout.db", alias="PLAYOUT_MARKER_NAME")

    # First-run initialization profile
    admin_username: str = Field(default="admin", alias="PLAYOUT_ADMIN_USERNAME")
    admin_password: SecretStr = Field(default=SecretStr("admin"), alias="PLAYOUT_ADMIN_PASSWORD")
    admin_email: str = Field(default="contact@example.com", alias="PLAYOUT_ADMIN_EMAIL")
    storage_dir: Path = Field(default=Path("/tv-media"), alias="PLAYOUT_STORAGE_DIR")
    playlist_dir: Path = Field(default=Path("/playlists"), alias="PLAYOUT_PLAYLIST_DIR")
    public_dir: Path = Field(default=Path("/public"), alias="PLAYOUT_PUBLIC_DIR")
    log_dir: Path = Field(default=Path("/logging"), alias="PLAYOUT_LOG_DIR")
    mail_host: str = Field(default="mail.example.org", alias="PLAYOUT_MAIL_HOST")
    mail_user: str = Field(default="admin@example.org", alias="PLAYOUT_MAIL_USER")
    mail_password: SecretStr = Field(default=SecretStr(""), alias="PLAYOUT_MAIL_PASSWORD")
    mail_port: int = Field(default=587, ge=1, le=65535, alias="PLAYOUT_MAIL_PORT")
    mail_tls: MailTls = Field(default="starttls", alias="PLAYOUT_MAIL_TLS")

    # Server start
    listen_host: str = Field(default="0.0.0.0", alias="PLAYOUT_LISTEN_HOST")
    listen_port: int = Field(default=8787, ge=1, le=65535, alias="PLAYOUT_LISTEN_PORT")
    exec_server: bool = Field(default=True, alias="PLAYOUT_EXEC_SERVER")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: Literal["json", "console"] = Field(default="json", alias="LOG_FORMAT")
    env: str = Field(default="prod", alias="ENV")  # dev|prod|test

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("version")
    @classmethod
    def _strip_version_prefix(cls, value: str) -> str:
        value = value.strip()
        if value.startswith("v"):
            value = value[1:]
        if not value:
            raise ValueError("version must not be empty")
        return value

    @field_validator("platform")
    @classmethod
    def _check_platform(cls, value: str) -> str:
        if value not in SUPPORTED_PLATFORMS:
            raise ValueError(f"unsupported platform {value!r}, expected one of {SUPPORTED_PLATFORMS}")
        return value

    @field_validator(
        "bin_dir",
        "assets_dir",
        "db_dir",
        "storage_dir",
        "playlist_dir",
        "public_dir",
        "log_dir",
    )
    @classmethod
    def _require_absolute(cls, value: Path) -> Path:
        if not value.is_absolute():
            raise ValueError(f"{value} must be an absolute path")
        return value

    @field_validator("admin_email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError(f"{value!r} is not an email address")
        return value

    @field_validator("archive_sha256")
    @classmethod
    def _normalize_checksum(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        value = value.strip().lower()
        if len(value) != 64 or any(c not in "0123456789abcdef" for c in value):
            raise ValueError("archive_sha256 must be a 64 character hex digest")
        return value

    @property
    def marker_path(self) -> Path:
        return self.db_dir / self.marker_name

    def init_profile(self) -> InitProfile:
        return InitProfile(
            admin_username=self.admin_username,
            admin_password=self.admin_password,
            admin_email=self.admin_email,
            storage_dir=self.storage_dir,
            playlist_dir=self.playlist_dir,
            public_dir=self.public_dir,
            log_dir=self.log_dir,
            mail=MailRelay(
                host=self.mail_host,
                user=self.mail_user,
                password=self.mail_password,
                port=self.mail_port,
                tls=self.mail_tls,
            ),
        )

    def listen_address(self) -> ListenAddress:
        return ListenAddress(host=self.listen_host, port=self.listen_port)


def _resolve_env_file() -> str | None:
    # 1) Explicit override
    explicit = os.getenv("PLAYOUT_ENV_FILE")
    if explicit and Path(explicit).is_file():
        return explicit

    # 2) CWD .env
    cwd_env = Path.cwd() / ".env"
    if cwd_env.is_file():
        return str(cwd_env)

    # 3) Walk up from this file to find nearest .env
    here = Path(__file__).resolve()
    for parent in here.parents:
        candidate = parent / ".env"
        if candidate.is_file():
            return str(candidate)
    return None


@lru_cache(maxsize=1)
def get_settings() -> PlayoutSettings:
    """Load settings once, from the environment and best-effort .env discovery."""
    env_file = _resolve_env_file()
    return PlayoutSettings(_env_file=env_file) if env_file else PlayoutSettings()  # type: ignore[call-arg]
