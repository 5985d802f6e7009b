"""
Global test configuration for playout-bootstrap.

Provides settings rooted in a temporary directory, a builder for release
archives shaped like the real ones, and fakes for the fetch and process
capabilities so no test touches the network or spawns the server.
"""

from __future__ import annotations

import io
import sys
import tarfile
from pathlib import Path

import pytest

# Ensure the project src directory is importable without relying on an installed package.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from playout_bootstrap.infra.exceptions import ProvisioningFetchError  # noqa: E402
from playout_bootstrap.infra.settings import PlayoutSettings, get_settings  # noqa: E402
from playout_bootstrap.provisioning.release import DEFAULT_ASSETS  # noqa: E402

VERSION = "0.25.3"
PLATFORM = "x86_64-unknown-linux-musl"
ARCHIVE_NAME = f"ffplayout-v{VERSION}_{PLATFORM}.tar.gz"


def build_release_archive(
    destination: Path,
    *,
    binary_name: str = "ffplayout",
    omit: tuple[str, ...] = (),
    top_dir: str | None = "ffplayout",
    extra_members: dict[str, bytes] | None = None,
) -> Path:
    """Write a .tar.gz laid out like a playout release and return its path."""
    members: dict[str, bytes] = {binary_name: b"#!/bin/sh\nexit 0\n"}
    for spec in DEFAULT_ASSETS:
        if spec.source not in omit:
            members[spec.source] = f"asset:{spec.target_name}".encode()
    members.update(extra_members or {})

    destination.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(destination, "w:gz") as tar:
        for name, data in members.items():
            arcname = f"{top_dir}/{name}" if top_dir and not name.startswith("../") else name
            info = tarfile.TarInfo(arcname)
            info.size = len(data)
            info.mode = 0o755 if name == binary_name else 0o644
            tar.addfile(info, io.BytesIO(data))
    return destination


class FakeFetcher:
    """ArtifactFetcher that writes a prepared payload or fails."""

    def __init__(self, payload: bytes | Path | None = None, error: str | None = None):
        self.payload = payload
        self.error = error
        self.calls: list[tuple[str, Path]] = []

    def fetch(self, url: str, destination: Path) -> int:
        self.calls.append((url, destination))
        if self.error:
            raise ProvisioningFetchError(self.error)
        data = self.payload.read_bytes() if isinstance(self.payload, Path) else (self.payload or b"")
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(data)
        return len(data)


class FakeRunner:
    """
    ServerRunner that records command lines.

    The init command "succeeds" with ``init_returncode``; when
    ``creates_marker`` is set it writes the marker the way the real server
    creates its database.
    """

    def __init__(
        self,
        marker: Path | None = None,
        *,
        init_returncode: int = 0,
        creates_marker: bool = True,
        serve_returncode: int = 0,
        init_error: Exception | None = None,
    ):
        self.marker = marker
        self.init_returncode = init_returncode
        self.creates_marker = creates_marker
        self.serve_returncode = serve_returncode
        self.init_error = init_error
        self.events: list[tuple[str, list[str]]] = []

    def run(self, argv: list[str]) -> int:
        self.events.append(("run", argv))
        if self.init_error is not None:
            raise self.init_error
        if self.marker is not None and self.creates_marker:
            self.marker.parent.mkdir(parents=True, exist_ok=True)
            self.marker.write_bytes(b"SQLite format 3\x00")
        return self.init_returncode

    def serve(self, argv: list[str]) -> int:
        self.events.append(("serve", argv))
        return self.serve_returncode

    @property
    def init_calls(self) -> list[list[str]]:
        return [argv for kind, argv in self.events if kind == "run"]

    @property
    def serve_calls(self) -> list[list[str]]:
        return [argv for kind, argv in self.events if kind == "serve"]


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def roots(tmp_path: Path) -> dict[str, Path]:
    return {
        "archive_dir": tmp_path / "prestage",
        "scratch_dir": tmp_path / "scratch",
        "bin_dir": tmp_path / "usr" / "bin",
        "assets_dir": tmp_path / "usr" / "share" / "ffplayout",
        "db_dir": tmp_path / "db",
        "storage_dir": tmp_path / "tv-media",
        "playlist_dir": tmp_path / "playlists",
        "public_dir": tmp_path / "public",
        "log_dir": tmp_path / "logging",
    }


@pytest.fixture
def settings(roots: dict[str, Path]) -> PlayoutSettings:
    """Default settings with every filesystem location under tmp_path."""
    return PlayoutSettings(
        version=VERSION,
        platform=PLATFORM,
        release_base_url="https://releases.example.org/download",
        **roots,
    )


@pytest.fixture
def release_archive(tmp_path: Path) -> Path:
    """A complete release archive outside the pre-stage directory."""
    return build_release_archive(tmp_path / "upstream" / ARCHIVE_NAME)


@pytest.fixture
def playout_env(monkeypatch, roots: dict[str, Path]) -> dict[str, Path]:
    """Point every PLAYOUT_* path setting at tmp_path through the environment."""
    for key, path in roots.items():
        monkeypatch.setenv(f"PLAYOUT_{key.upper()}", str(path))
    monkeypatch.setenv("PLAYOUT_VERSION", VERSION)
    monkeypatch.setenv("PLAYOUT_RELEASE_BASE_URL", "https://releases.example.org/download")
    monkeypatch.setenv("PLAYOUT_EXEC_SERVER", "false")
    return roots


@pytest.fixture
def make_archive():
    return build_release_archive


@pytest.fixture
def make_fetcher():
    return FakeFetcher


@pytest.fixture
def make_runner():
    return FakeRunner
