"""
Run-time bootstrap: one-time state initialization and server start.
"""

from .orchestrator import BootstrapState, Orchestrator
from .server_process import (
    ServerRunner,
    SubprocessServerRunner,
    build_init_command,
    build_serve_command,
)
from .state_marker import StateMarker

__all__ = [
    "BootstrapState",
    "Orchestrator",
    "ServerRunner",
    "StateMarker",
    "SubprocessServerRunner",
    "build_init_command",
    "build_serve_command",
]
