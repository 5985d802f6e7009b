"""
Playout server process management.

Builds the two command lines the bootstrap issues against the server
binary (one-time initialization and serve) and runs them. In containers
the serve command replaces the bootstrap process via exec so the server
receives the runtime's signals directly and its exit status becomes the
container's.
"""

from __future__ import annotations

import os
import signal
import subprocess
import sys
from pathlib import Path
from typing import Protocol

from ..infra.logging import get_logger, redact_argv
from ..infra.settings import InitProfile, ListenAddress

# Shell conventions for a command that cannot be executed
EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126


def build_init_command(binary: str | Path, profile: InitProfile) -> list[str]:
    """Command line for the server's one-time initialization."""
    mail = profile.mail
    argv = [
        str(binary),
        "-u", profile.admin_username,
        "-p", profile.admin_password.get_secret_value(),
        "-m", profile.admin_email,
        "--storage", str(profile.storage_dir),
        "--playlists", str(profile.playlist_dir),
        "--public", str(profile.public_dir),
        "--logs", str(profile.log_dir),
        "--mail-smtp", mail.host,
        "--mail-user", mail.user,
        "--mail-password", mail.password.get_secret_value(),
        "--mail-port", str(mail.port),
    ]
    # "tls" means implicit TLS on the relay port and needs no flag
    if mail.tls == "starttls":
        argv.append("--mail-starttls")
    return argv


def build_serve_command(binary: str | Path, listen: ListenAddress) -> list[str]:
    """Command line that starts the server bound to ``listen``."""
    return [str(binary), "-l", str(listen)]


class ServerRunner(Protocol):
    """Runs server command lines on behalf of the orchestrator."""

    def run(self, argv: list[str]) -> int:
        """Run a bounded command to completion and return its exit code."""
        ...

    def serve(self, argv: list[str]) -> int:
        """Start the long-running server; returns its exit code if it ever returns."""
        ...


class SubprocessServerRunner:
    """
    ServerRunner backed by the OS.

    Args:
        exec_mode: Replace the current process with the server (os.execvp).
            When False the server runs as a child, termination signals are
            forwarded to it, and its exit code is returned.
    """

    def __init__(self, exec_mode: bool = True) -> None:
        self.exec_mode = exec_mode

    def run(self, argv: list[str]) -> int:
        logger = get_logger(__name__)
        logger.info("command_start", argv=redact_argv(argv))
        completed = subprocess.run(argv, check=False)
        logger.info("command_exit", program=argv[0], returncode=completed.returncode)
        return completed.returncode

    def serve(self, argv: list[str]) -> int:
        logger = get_logger(__name__)
        logger.info("server_start", argv=redact_argv(argv), exec_mode=self.exec_mode)

        if self.exec_mode:
            return self._exec(argv)

        try:
            proc = subprocess.Popen(argv)
        except OSError as e:
            return self._start_failed(argv, e)

        def forward(signum, _frame):
            if proc.poll() is None:
                proc.send_signal(signum)

        previous = {sig: signal.signal(sig, forward) for sig in (signal.SIGTERM, signal.SIGINT)}
        try:
            returncode = proc.wait()
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)
        logger.info("server_exit", returncode=returncode)
        return returncode

    def _exec(self, argv: list[str]) -> int:
        sys.stdout.flush()
        sys.stderr.flush()
        try:
            os.execvp(argv[0], argv)
        except OSError as e:
            return self._start_failed(argv, e)
        return 0  # only reached when execvp is patched out

    def _start_failed(self, argv: list[str], error: OSError) -> int:
        code = EXIT_NOT_FOUND if isinstance(error, FileNotFoundError) else EXIT_NOT_EXECUTABLE
        get_logger(__name__).error(
            "server_exec_failed", program=argv[0], error=str(error), exit_code=code
        )
        return code


__all__ = [
    "EXIT_NOT_EXECUTABLE",
    "EXIT_NOT_FOUND",
    "ServerRunner",
    "SubprocessServerRunner",
    "build_init_command",
    "build_serve_command",
]
