"""
Artifact Provisioner: build-time install of the server binary and assets.

Pipeline:
  ensure_artifact  -> reuse a pre-staged archive or fetch it (Cached | Fetched | Failed)
  extract_archive  -> unpack into a scratch directory
  stage_release    -> binary into the executable path, assets into the shared directory
  cleanup          -> scratch directory removed whatever the outcome

Any failure raises a ProvisioningError subclass so the image build aborts
without producing a partially staged layer.
"""

from __future__ import annotations

import os
import shutil
import stat
import tarfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..infra.exceptions import (
    ProvisioningArchiveError,
    ProvisioningAssetError,
    ProvisioningError,
    ProvisioningFetchError,
)
from ..infra.logging import get_logger
from ..infra.settings import PlayoutSettings
from .fetch import ArtifactFetcher, HttpArtifactFetcher
from .integrity import verify_archive
from .release import DEFAULT_ASSETS, AssetSpec, ReleaseArtifact


class ArtifactStatus(str, Enum):
    CACHED = "cached"
    FETCHED = "fetched"
    FAILED = "failed"


@dataclass
class ArtifactResult:
    """Outcome of ensure_artifact."""

    status: ArtifactStatus
    archive_path: Path
    error: ProvisioningError | None = None
    sha256: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is not ArtifactStatus.FAILED


@dataclass
class ProvisionReport:
    """What provision() installed, for CLI output and build logs."""

    artifact: ReleaseArtifact
    status: ArtifactStatus
    archive_path: Path
    binary_path: Path
    asset_paths: list[Path] = field(default_factory=list)
    sha256: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "binary_name": self.artifact.binary_name,
            "version": self.artifact.version,
            "platform": self.artifact.platform,
            "artifact_status": self.status.value,
            "archive": str(self.archive_path),
            "binary": str(self.binary_path),
            "assets": [str(p) for p in self.asset_paths],
            "sha256": self.sha256,
        }


def ensure_artifact(
    artifact: ReleaseArtifact,
    archive_dir: Path,
    fetcher: ArtifactFetcher,
    base_url: str,
    expected_sha256: str | None = None,
) -> ArtifactResult:
    """
    Make sure the release archive is present in ``archive_dir``.

    A non-empty archive already at the expected filename is reused and the
    fetcher is not called. Otherwise the archive is fetched from its
    version-addressed URL. Errors are returned in the result, not raised.
    """
    logger = get_logger(__name__)
    archive_path = archive_dir / artifact.archive_name

    if archive_path.is_file() and archive_path.stat().st_size > 0:
        status = ArtifactStatus.CACHED
        logger.info("archive_cached", path=str(archive_path))
    else:
        url = artifact.download_url(base_url)
        logger.info("archive_fetch_start", url=url, path=str(archive_path))
        try:
            fetcher.fetch(url, archive_path)
        except ProvisioningFetchError as e:
            logger.error("archive_fetch_failed", url=url, error=str(e))
            return ArtifactResult(ArtifactStatus.FAILED, archive_path, error=e)
        if not archive_path.is_file() or archive_path.stat().st_size == 0:
            archive_path.unlink(missing_ok=True)
            error = ProvisioningFetchError(f"Fetched empty payload from {url}")
            logger.error("archive_fetch_failed", url=url, error=str(error))
            return ArtifactResult(ArtifactStatus.FAILED, archive_path, error=error)
        status = ArtifactStatus.FETCHED

    if expected_sha256 is None:
        logger.warning("archive_unverified", path=str(archive_path))
        return ArtifactResult(status, archive_path)

    try:
        digest = verify_archive(archive_path, expected_sha256)
    except ProvisioningError as e:
        logger.error("archive_checksum_mismatch", path=str(archive_path), error=str(e))
        if status is ArtifactStatus.FETCHED:
            archive_path.unlink(missing_ok=True)
        return ArtifactResult(ArtifactStatus.FAILED, archive_path, error=e)

    return ArtifactResult(status, archive_path, sha256=digest)


def extract_archive(archive_path: Path, scratch_dir: Path) -> Path:
    """Unpack ``archive_path`` into ``scratch_dir`` and return the directory."""
    scratch_dir.mkdir(parents=True, exist_ok=True)
    root = scratch_dir.resolve()
    try:
        with tarfile.open(archive_path, "r:*") as tar:
            for member in tar.getmembers():
                target = (root / member.name).resolve()
                if target != root and root not in target.parents:
                    raise ProvisioningArchiveError(
                        f"Archive member '{member.name}' escapes the extraction directory"
                    )
            tar.extractall(root, filter="data")
    except (tarfile.TarError, OSError) as e:
        raise ProvisioningArchiveError(f"Cannot extract {archive_path.name}: {e}") from e
    return root


def _find_release_root(extracted: Path, binary_name: str) -> Path:
    """The directory holding the binary: the root itself or one level down."""
    if (extracted / binary_name).is_file():
        return extracted
    candidates = [p for p in sorted(extracted.iterdir()) if p.is_dir() and (p / binary_name).is_file()]
    if not candidates:
        raise ProvisioningAssetError(f"Binary '{binary_name}' not found in release archive")
    return candidates[0]


def _copy_required(source: Path, target: Path) -> Path:
    if not source.is_file():
        raise ProvisioningAssetError(f"Expected file '{source.name}' missing from release archive ({source})")
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, target)
    return target


def stage_release(
    extracted: Path,
    artifact: ReleaseArtifact,
    bin_dir: Path,
    assets_dir: Path,
    assets: tuple[AssetSpec, ...] = DEFAULT_ASSETS,
) -> tuple[Path, list[Path]]:
    """
    Copy the binary and every asset to their fixed locations.

    Every asset is checked before anything is copied, so a missing asset
    leaves the install locations untouched.

    Raises:
        ProvisioningAssetError: If the binary or any listed asset is missing
    """
    release_root = _find_release_root(extracted, artifact.binary_name)

    missing = [spec.source for spec in assets if not (release_root / spec.source_path).is_file()]
    if missing:
        raise ProvisioningAssetError(f"Release archive is missing expected assets: {', '.join(missing)}")

    binary = _copy_required(release_root / artifact.binary_name, bin_dir / artifact.binary_name)
    mode = binary.stat().st_mode
    binary.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    staged = [
        _copy_required(release_root / spec.source_path, assets_dir / spec.target_name)
        for spec in assets
    ]
    return binary, staged


def provision(
    settings: PlayoutSettings,
    fetcher: ArtifactFetcher | None = None,
    *,
    keep_archive: bool = True,
    assets: tuple[AssetSpec, ...] = DEFAULT_ASSETS,
) -> ProvisionReport:
    """
    Run the full provisioning pipeline described by ``settings``.

    Args:
        settings: Bootstrap settings (version, platform, paths)
        fetcher: Download capability; defaults to HttpArtifactFetcher
        keep_archive: When False, a freshly fetched archive is deleted after
            staging. A pre-staged archive is never deleted.
        assets: Asset files to stage from the archive

    Raises:
        ProvisioningError: Any failure; the build must abort
    """
    logger = get_logger(__name__)
    artifact = ReleaseArtifact(settings.binary_name, settings.version, settings.platform)
    fetcher = fetcher or HttpArtifactFetcher(timeout=settings.fetch_timeout)

    logger.info(
        "provision_start",
        binary=artifact.binary_name,
        version=artifact.version,
        platform=artifact.platform,
    )
    result = ensure_artifact(
        artifact,
        settings.archive_dir,
        fetcher,
        settings.release_base_url,
        settings.archive_sha256,
    )
    if result.error is not None:
        raise result.error

    scratch = settings.scratch_dir / f"{artifact.binary_name}-{artifact.tag}"
    try:
        extracted = extract_archive(result.archive_path, scratch)
        binary, staged = stage_release(extracted, artifact, settings.bin_dir, settings.assets_dir, assets)
    finally:
        shutil.rmtree(scratch, ignore_errors=True)
        if not keep_archive and result.status is ArtifactStatus.FETCHED:
            result.archive_path.unlink(missing_ok=True)

    if not os.access(binary, os.X_OK):
        raise ProvisioningAssetError(f"Installed binary {binary} is not executable")

    logger.info(
        "provision_complete",
        status=result.status.value,
        binary=str(binary),
        assets=[str(p) for p in staged],
    )
    return ProvisionReport(
        artifact=artifact,
        status=result.status,
        archive_path=result.archive_path,
        binary_path=binary,
        asset_paths=staged,
        sha256=result.sha256,
    )


__all__ = [
    "ArtifactResult",
    "ArtifactStatus",
    "ProvisionReport",
    "ensure_artifact",
    "extract_archive",
    "provision",
    "stage_release",
]
