"""Checksum verification for release archives."""

from __future__ import annotations

import hashlib
from pathlib import Path

from ..infra.exceptions import ProvisioningIntegrityError


def sha256_of(path: Path, chunk_size: int = 1024 * 1024) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for block in iter(lambda: f.read(chunk_size), b""):
            digest.update(block)
    return digest.hexdigest()


def verify_archive(path: Path, expected_sha256: str) -> str:
    """
    Compare the archive's SHA-256 with ``expected_sha256``.

    Returns:
        The computed digest

    Raises:
        ProvisioningIntegrityError: If the digests differ
    """
    actual = sha256_of(path)
    if actual != expected_sha256.lower():
        raise ProvisioningIntegrityError(
            f"Checksum mismatch for {path.name}: expected {expected_sha256.lower()}, got {actual}"
        )
    return actual


__all__ = ["sha256_of", "verify_archive"]
