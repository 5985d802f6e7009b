"""
Release archive download.

The provisioner depends on the ArtifactFetcher protocol only, so tests
hand it a fake and never touch the network.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..infra.exceptions import ProvisioningFetchError
from ..infra.logging import get_logger

CHUNK_SIZE = 1024 * 1024


class ArtifactFetcher(Protocol):
    """Downloads a URL to a local file."""

    def fetch(self, url: str, destination: Path) -> int:
        """
        Download ``url`` to ``destination``.

        Returns:
            Number of bytes written

        Raises:
            ProvisioningFetchError: On a transport error, a non-2xx status
                or an empty body. No file is left at ``destination``.
        """
        ...


class HttpArtifactFetcher:
    """HTTP fetcher backed by a requests session with retries."""

    def __init__(self, timeout: int = 60, session: requests.Session | None = None):
        self.timeout = timeout
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session with retry logic."""
        session = requests.Session()

        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update({"User-Agent": "playout-bootstrap"})
        return session

    def fetch(self, url: str, destination: Path) -> int:
        logger = get_logger(__name__)
        destination.parent.mkdir(parents=True, exist_ok=True)
        partial = destination.with_name(destination.name + ".part")
        written = 0

        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                with open(partial, "wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
                            written += len(chunk)
        except (requests.RequestException, OSError) as e:
            partial.unlink(missing_ok=True)
            raise ProvisioningFetchError(f"Failed to fetch {url}: {e}") from e

        if written == 0:
            partial.unlink(missing_ok=True)
            raise ProvisioningFetchError(f"Fetched empty payload from {url}")

        os.replace(partial, destination)
        logger.info("archive_fetched", url=url, path=str(destination), bytes=written)
        return written


__all__ = ["ArtifactFetcher", "HttpArtifactFetcher"]
