"""
Build-time provisioning of the playout server release.

Resolves the pinned release archive, reuses or fetches it, and stages the
binary and its runtime assets at fixed paths.
"""

from .fetch import ArtifactFetcher, HttpArtifactFetcher
from .provisioner import (
    ArtifactResult,
    ArtifactStatus,
    ProvisionReport,
    ensure_artifact,
    extract_archive,
    provision,
    stage_release,
)
from .release import DEFAULT_ASSETS, AssetSpec, ReleaseArtifact

__all__ = [
    "ArtifactFetcher",
    "ArtifactResult",
    "ArtifactStatus",
    "AssetSpec",
    "DEFAULT_ASSETS",
    "HttpArtifactFetcher",
    "ProvisionReport",
    "ReleaseArtifact",
    "ensure_artifact",
    "extract_archive",
    "provision",
    "stage_release",
]
