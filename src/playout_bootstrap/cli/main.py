"""
Main CLI application using Typer with router-based command dispatch.

All command groups are registered through the centralized CliRouter.
`provision` and `start` are top-level aliases used by the image build and
the container entrypoint.
"""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError

from ..infra.logging import configure_logging
from .commands import config, release, server
from .router import get_router

app = typer.Typer(help="Playout server container bootstrap")

router = get_router(app)

router.register(
    "release",
    release.app,
    help_text="Build-time release provisioning",
)

router.register(
    "server",
    server.app,
    help_text="Run-time initialization and server start",
)

router.register(
    "config",
    config.app,
    help_text="Effective settings inspection",
)


@app.command("provision")
def provision_alias(
    version: str = typer.Option(None, "--version", help="Release version, e.g. 0.25.3"),
    archive_dir: Path = typer.Option(None, "--archive-dir", help="Directory searched for a pre-staged archive"),
    sha256: str = typer.Option(None, "--sha256", help="Expected archive SHA-256"),
    keep_archive: bool = typer.Option(True, "--keep-archive/--remove-archive"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Provision the pinned release (alias for `release provision`)."""
    release.provision(
        version=version,
        platform=None,
        archive_dir=archive_dir,
        base_url=None,
        sha256=sha256,
        keep_archive=keep_archive,
        json_output=json_output,
    )


@app.command("start")
def start_alias(
    exec_server: bool = typer.Option(None, "--exec/--no-exec", help="Replace this process with the server"),
):
    """Initialize if needed, then start the server (alias for `server start`)."""
    raise typer.Exit(server.start_server(exec_server))


@app.callback()
def main(
    log_level: str = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
    log_format: str = typer.Option(None, "--log-format", help="json or console"),
):
    """playout-bootstrap - provision and launch a playout server container."""
    try:
        configure_logging(level=log_level, fmt=log_format)
    except ValidationError:
        # Invalid settings are reported by the command itself
        configure_logging(level=log_level or "INFO", fmt=log_format or "json")


def cli():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
