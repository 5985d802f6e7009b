"""Tests for release artifact identity and naming."""

import pytest

from playout_bootstrap.infra.exceptions import ProvisioningConfigError
from playout_bootstrap.provisioning.release import DEFAULT_ASSETS, ReleaseArtifact


def test_archive_name_follows_release_convention():
    artifact = ReleaseArtifact("ffplayout", "0.25.3", "x86_64-unknown-linux-musl")
    assert artifact.archive_name == "ffplayout-v0.25.3_x86_64-unknown-linux-musl.tar.gz"


def test_download_url_is_version_addressed():
    artifact = ReleaseArtifact("ffplayout", "0.25.3", "x86_64-unknown-linux-musl")
    url = artifact.download_url("https://github.com/ffplayout/ffplayout/releases/download/")
    assert url == (
        "https://github.com/ffplayout/ffplayout/releases/download/"
        "v0.25.3/ffplayout-v0.25.3_x86_64-unknown-linux-musl.tar.gz"
    )


def test_leading_v_is_stripped():
    artifact = ReleaseArtifact("ffplayout", "v0.25.3", "x86_64-unknown-linux-musl")
    assert artifact.version == "0.25.3"
    assert artifact.tag == "v0.25.3"


@pytest.mark.parametrize("version", ["", "   ", "v"])
def test_empty_version_rejected(version):
    with pytest.raises(ProvisioningConfigError):
        ReleaseArtifact("ffplayout", version, "x86_64-unknown-linux-musl")


def test_unsupported_platform_rejected():
    with pytest.raises(ProvisioningConfigError, match="Unsupported platform"):
        ReleaseArtifact("ffplayout", "0.25.3", "aarch64-apple-darwin")


def test_empty_binary_name_rejected():
    with pytest.raises(ProvisioningConfigError):
        ReleaseArtifact("", "0.25.3", "x86_64-unknown-linux-musl")


def test_default_assets_cover_font_license_caption_and_logo():
    names = {spec.target_name for spec in DEFAULT_ASSETS}
    assert names == {"DejaVuSans.ttf", "FONT_LICENSE.txt", "dummy.vtt", "logo.png"}
