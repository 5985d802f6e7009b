"""
Bootstrap Orchestrator: run-time first-launch initialization and server start.

State machine per container start:

    UNINITIALIZED --init ok--> INITIALIZED --serve--> SERVING
    UNINITIALIZED --init fails--> FAILED (non-zero exit, no marker, no serve)
    INITIALIZED (marker already present) --serve--> SERVING

Initialization, when it happens, finishes before the server starts. The
initialization profile is applied only on the way out of UNINITIALIZED,
so restarts against existing storage never overwrite server-owned
configuration.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from ..infra.exceptions import InitializationError
from ..infra.logging import get_logger
from ..infra.settings import InitProfile, ListenAddress, PlayoutSettings
from .server_process import ServerRunner, build_init_command, build_serve_command
from .state_marker import StateMarker


class BootstrapState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    FAILED = "failed"
    SERVING = "serving"


class Orchestrator:
    """
    Drives one container start from marker check to foreground server.

    Args:
        binary: Server executable (absolute path or a name resolved on PATH)
        marker: State marker in durable storage
        profile: First-run initialization profile
        listen: Address the server binds to
        runner: Executes the init and serve command lines
    """

    def __init__(
        self,
        binary: str | Path,
        marker: StateMarker,
        profile: InitProfile,
        listen: ListenAddress,
        runner: ServerRunner,
    ) -> None:
        self.binary = binary
        self.marker = marker
        self.profile = profile
        self.listen = listen
        self.runner = runner
        self.state = BootstrapState.INITIALIZED if marker.initialized() else BootstrapState.UNINITIALIZED
        self._logger = get_logger(__name__)

    @classmethod
    def from_settings(cls, settings: PlayoutSettings, runner: ServerRunner) -> Orchestrator:
        installed = settings.bin_dir / settings.binary_name
        binary: str | Path = installed if installed.is_file() else settings.binary_name
        return cls(
            binary=binary,
            marker=StateMarker(settings.marker_path),
            profile=settings.init_profile(),
            listen=settings.listen_address(),
            runner=runner,
        )

    def current_state(self) -> BootstrapState:
        if self.state in (BootstrapState.FAILED, BootstrapState.SERVING):
            return self.state
        return BootstrapState.INITIALIZED if self.marker.initialized() else BootstrapState.UNINITIALIZED

    def ensure_initialized(self) -> bool:
        """
        Initialize persistent state if the marker is absent.

        Returns:
            True if initialization ran, False if it was skipped

        Raises:
            InitializationError: Initialization failed or the storage directory is
                unusable; the marker does not exist
            InitializationLockedError: Another bootstrap holds the claim, or an
                earlier initialization was interrupted
        """
        # A marker beside a leftover lock comes from an interrupted run; claim() refuses it
        if self.marker.initialized():
            self.state = BootstrapState.INITIALIZED
            self._logger.info("init_skipped", marker=str(self.marker.path))
            return False

        with self.marker.claimed_for_init():
            # Another bootstrap may have finished between the check and the claim
            if self.marker.exists():
                self.state = BootstrapState.INITIALIZED
                self._logger.info("init_skipped", marker=str(self.marker.path))
                return False

            self._logger.info(
                "init_start",
                marker=str(self.marker.path),
                admin_username=self.profile.admin_username,
                admin_email=self.profile.admin_email,
            )
            argv = build_init_command(self.binary, self.profile)
            try:
                for directory in self.profile.directories:
                    directory.mkdir(parents=True, exist_ok=True)
                returncode = self.runner.run(argv)
            except OSError as e:
                self._fail(str(e))
                raise InitializationError(f"Initialization could not run: {e}") from e

            if returncode != 0:
                self._fail(f"exit status {returncode}")
                raise InitializationError(f"Initialization command exited with status {returncode}")

            self.marker.finalize()

        self.state = BootstrapState.INITIALIZED
        self._logger.info("init_complete", marker=str(self.marker.path))
        return True

    def _fail(self, reason: str) -> None:
        self.state = BootstrapState.FAILED
        self.marker.discard()
        self._logger.error("init_failed", reason=reason, marker=str(self.marker.path))

    def serve(self) -> int:
        """Start the server in the foreground and return its exit status."""
        if self.state is not BootstrapState.INITIALIZED:
            raise InitializationError(f"Cannot start server from state '{self.state.value}'")
        self.state = BootstrapState.SERVING
        self._logger.info("serve", listen=str(self.listen))
        return self.runner.serve(build_serve_command(self.binary, self.listen))

    def run(self) -> int:
        """Full container start: initialize if needed, then serve."""
        self.ensure_initialized()
        return self.serve()


__all__ = ["BootstrapState", "Orchestrator"]
