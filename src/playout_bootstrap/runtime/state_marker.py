"""
Persistent state marker for first-run initialization.

The marker is a file inside the durable storage directory (by default the
server's own database file). Its presence, with no init lock beside it, is
the only signal that initialization has completed. This module never deletes a marker that
existed before the current bootstrap.

Initialization is claimed with an exclusively created sibling lock file
(``<marker>.init-lock``). The claim is held for the whole initialization
and released afterwards whatever the outcome. A lock that outlives its
bootstrap means initialization was interrupted: the marker beside it is not
trusted, and the operator removes both files before the next start.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from ..infra.exceptions import InitializationError, InitializationLockedError
from ..infra.logging import get_logger

LOCK_SUFFIX = ".init-lock"


class StateMarker:
    """The file whose existence means persistent state is initialized."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.lock_path = path.with_name(path.name + LOCK_SUFFIX)
        self._claimed = False

    def exists(self) -> bool:
        return self.path.exists()

    def locked(self) -> bool:
        return self.lock_path.exists()

    def initialized(self) -> bool:
        """True when the marker exists and no initialization is in flight."""
        return self.exists() and not self.locked()

    @property
    def claimed(self) -> bool:
        return self._claimed

    def claim(self) -> None:
        """
        Take the initialization claim via exclusive creation of the lock file.

        Raises:
            InitializationLockedError: If the lock file already exists
            InitializationError: If the storage directory cannot hold the lock
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InitializationError(f"Storage directory {self.path.parent} is not usable: {e}") from e

        try:
            fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError as e:
            stale = f"the lock file and {self.path}" if self.exists() else "the lock file"
            raise InitializationLockedError(
                f"Initialization in progress or interrupted ({self.lock_path} exists). "
                f"If no other bootstrap is running, remove {stale} and restart."
            ) from e
        except OSError as e:
            raise InitializationError(f"Cannot create init lock {self.lock_path}: {e}") from e
        try:
            with os.fdopen(fd, "w") as f:
                f.write(f"pid={os.getpid()} claimed_at={datetime.now(timezone.utc).isoformat()}\n")
        except OSError as e:
            self.lock_path.unlink(missing_ok=True)
            raise InitializationError(f"Cannot write init lock {self.lock_path}: {e}") from e
        self._claimed = True
        get_logger(__name__).debug("init_claimed", lock=str(self.lock_path))

    def release(self) -> None:
        if not self._claimed:
            return
        self.lock_path.unlink(missing_ok=True)
        self._claimed = False
        get_logger(__name__).debug("init_released", lock=str(self.lock_path))

    @contextmanager
    def claimed_for_init(self) -> Iterator[StateMarker]:
        """Hold the initialization claim for the duration of the block."""
        self.claim()
        try:
            yield self
        finally:
            self.release()

    def finalize(self) -> bool:
        """
        Make sure the marker exists after a successful initialization.

        Returns:
            True if the marker had to be written here, False if the server
            already created it
        """
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return False
        os.close(fd)
        get_logger(__name__).warning("marker_written_by_bootstrap", marker=str(self.path))
        return True

    def discard(self) -> None:
        """Remove a marker left behind by a failed initialization."""
        if self.path.exists():
            self.path.unlink()
            get_logger(__name__).warning("partial_marker_removed", marker=str(self.path))


__all__ = ["LOCK_SUFFIX", "StateMarker"]
