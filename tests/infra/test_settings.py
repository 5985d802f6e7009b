"""Tests for settings defaults, environment overrides and validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from playout_bootstrap.infra.settings import PlayoutSettings, get_settings


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run from an empty directory with no PLAYOUT_* variables set."""
    import os

    for key in list(os.environ):
        if key.startswith("PLAYOUT_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


def test_defaults_match_container_layout(clean_env):
    settings = PlayoutSettings()

    assert settings.version == "0.25.3"
    assert settings.platform == "x86_64-unknown-linux-musl"
    assert settings.bin_dir == Path("/usr/bin")
    assert settings.assets_dir == Path("/usr/share/ffplayout")
    assert settings.marker_path == Path("/db/ffplayout.db")
    assert str(settings.listen_address()) == "0.0.0.0:8787"


def test_init_profile_enumerates_every_option(clean_env):
    profile = PlayoutSettings().init_profile()

    assert profile.admin_username == "admin"
    assert profile.admin_password.get_secret_value() == "admin"
    assert profile.admin_email == "contact@example.com"
    assert profile.directories == [
        Path("/tv-media"),
        Path("/playlists"),
        Path("/public"),
        Path("/logging"),
    ]
    assert profile.mail.host == "mail.example.org"
    assert profile.mail.user == "admin@example.org"
    assert profile.mail.password.get_secret_value() == ""
    assert profile.mail.port == 587
    assert profile.mail.tls == "starttls"


def test_environment_overrides(clean_env, monkeypatch):
    monkeypatch.setenv("PLAYOUT_VERSION", "v0.26.0")
    monkeypatch.setenv("PLAYOUT_LISTEN_PORT", "9000")
    monkeypatch.setenv("PLAYOUT_MAIL_TLS", "none")
    monkeypatch.setenv("PLAYOUT_ADMIN_PASSWORD", "hunter2")

    settings = PlayoutSettings()

    assert settings.version == "0.26.0"
    assert settings.listen_port == 9000
    assert settings.mail_tls == "none"
    assert settings.admin_password.get_secret_value() == "hunter2"
    assert "hunter2" not in repr(settings)


def test_env_file_is_discovered_from_cwd(clean_env, tmp_path):
    (tmp_path / ".env").write_text("PLAYOUT_LISTEN_PORT=8080\n")

    assert get_settings().listen_port == 8080


@pytest.mark.parametrize(
    "overrides",
    [
        {"version": ""},
        {"platform": "aarch64-apple-darwin"},
        {"db_dir": "relative/db"},
        {"listen_port": 0},
        {"mail_port": 70000},
        {"mail_tls": "ssl"},
        {"admin_email": "not-an-email"},
        {"archive_sha256": "abc"},
    ],
)
def test_invalid_values_rejected(clean_env, overrides):
    with pytest.raises(ValidationError):
        PlayoutSettings(**overrides)


def test_checksum_normalized(clean_env):
    digest = "AB" * 32
    assert PlayoutSettings(archive_sha256=digest).archive_sha256 == digest.lower()
    assert PlayoutSettings(archive_sha256="  ").archive_sha256 is None
