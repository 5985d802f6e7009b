"""
Release artifact identity and the asset list staged from it.

A release is addressed by (binary name, version, platform). The same
triple always names the same archive, so a pre-staged copy of the archive
can stand in for a download.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath

from ..infra.exceptions import ProvisioningConfigError
from ..infra.settings import SUPPORTED_PLATFORMS


@dataclass(frozen=True)
class AssetSpec:
    """A file inside the release archive and the name it is staged under."""

    source: str  # path relative to the extracted release root
    target_name: str

    @property
    def source_path(self) -> PurePosixPath:
        return PurePosixPath(self.source)


# Runtime assets the server reads from the shared assets directory.
DEFAULT_ASSETS: tuple[AssetSpec, ...] = (
    AssetSpec("assets/DejaVuSans.ttf", "DejaVuSans.ttf"),
    AssetSpec("assets/FONT_LICENSE.txt", "FONT_LICENSE.txt"),
    AssetSpec("assets/dummy.vtt", "dummy.vtt"),
    AssetSpec("assets/logo.png", "logo.png"),
)


@dataclass(frozen=True)
class ReleaseArtifact:
    """
    An immutable, version-tagged server bundle for one platform.

    Construction validates the identity; an empty version or an unsupported
    platform raises ProvisioningConfigError.
    """

    binary_name: str
    version: str
    platform: str

    def __post_init__(self) -> None:
        version = (self.version or "").strip()
        if version.startswith("v"):
            version = version[1:]
        if not version:
            raise ProvisioningConfigError("Release version must not be empty")
        object.__setattr__(self, "version", version)

        if not (self.binary_name or "").strip():
            raise ProvisioningConfigError("Binary name must not be empty")

        if self.platform not in SUPPORTED_PLATFORMS:
            raise ProvisioningConfigError(
                f"Unsupported platform '{self.platform}'; supported: {', '.join(SUPPORTED_PLATFORMS)}"
            )

    @property
    def tag(self) -> str:
        return f"v{self.version}"

    @property
    def archive_name(self) -> str:
        """Archive filename, e.g. ``ffplayout-v0.25.3_x86_64-unknown-linux-musl.tar.gz``."""
        return f"{self.binary_name}-{self.tag}_{self.platform}.tar.gz"

    def download_url(self, base_url: str) -> str:
        """Version-addressed location of the archive under ``base_url``."""
        return f"{base_url.rstrip('/')}/{self.tag}/{self.archive_name}"


__all__ = ["AssetSpec", "DEFAULT_ASSETS", "ReleaseArtifact"]
