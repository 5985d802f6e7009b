"""
Release command group: build-time provisioning of the pinned server release.

`provision` runs once per image build. Any failure exits non-zero so the
build aborts before a partially staged layer is committed.
"""

from __future__ import annotations

from pathlib import Path

import typer

from ...infra.exceptions import ProvisioningError
from ...provisioning import ReleaseArtifact
from ...provisioning import provision as run_provision
from ._ops import emit, exit_with_error, load_settings

app = typer.Typer(name="release", help="Build-time release provisioning")


@app.command("provision")
def provision(
    version: str | None = typer.Option(None, "--version", help="Release version, e.g. 0.25.3"),
    platform: str | None = typer.Option(None, "--platform", help="Target platform triple"),
    archive_dir: Path | None = typer.Option(
        None, "--archive-dir", help="Directory searched for a pre-staged archive"
    ),
    base_url: str | None = typer.Option(None, "--base-url", help="Release download base URL"),
    sha256: str | None = typer.Option(None, "--sha256", help="Expected archive SHA-256"),
    keep_archive: bool = typer.Option(
        True,
        "--keep-archive/--remove-archive",
        help="Keep a fetched archive after staging",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Obtain the release archive (reuse or fetch), then stage binary and assets.

    Examples:
        playout-bootstrap release provision
        playout-bootstrap release provision --version 0.25.3 --remove-archive
    """
    settings = load_settings(
        json_output,
        version=version,
        platform=platform,
        archive_dir=archive_dir,
        release_base_url=base_url,
        archive_sha256=sha256,
    )

    try:
        report = run_provision(settings, keep_archive=keep_archive)
    except ProvisioningError as e:
        exit_with_error(e, json_output)

    lines = [
        f"Provisioned {report.artifact.binary_name} {report.artifact.tag} ({report.status.value})",
        f"  binary: {report.binary_path}",
    ]
    lines.extend(f"  asset:  {p}" for p in report.asset_paths)
    emit({"status": "ok", **report.to_dict()}, json_output, lines)


@app.command("info")
def info(
    version: str | None = typer.Option(None, "--version", help="Release version, e.g. 0.25.3"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Show the archive name and download URL for the pinned release.

    Examples:
        playout-bootstrap release info --json
    """
    settings = load_settings(json_output, version=version)
    try:
        artifact = ReleaseArtifact(settings.binary_name, settings.version, settings.platform)
    except ProvisioningError as e:
        exit_with_error(e, json_output)

    archive_path = settings.archive_dir / artifact.archive_name
    result = {
        "binary_name": artifact.binary_name,
        "version": artifact.version,
        "platform": artifact.platform,
        "archive": artifact.archive_name,
        "url": artifact.download_url(settings.release_base_url),
        "staged": archive_path.is_file(),
    }
    emit(
        result,
        json_output,
        [
            f"Archive: {result['archive']}",
            f"URL:     {result['url']}",
            f"Staged:  {'yes' if result['staged'] else 'no'} ({archive_path})",
        ],
    )
