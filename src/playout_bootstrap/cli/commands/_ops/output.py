"""
Output and error handling shared by the CLI commands.

Commands print a result either as indented JSON (``--json``) or as short
human-readable lines, and turn PlayoutBootstrapError subclasses into the
exit code each error declares.
"""

from __future__ import annotations

import json
from typing import Any, NoReturn

import typer
from pydantic import ValidationError

from ....infra.exceptions import ConfigurationError, PlayoutBootstrapError
from ....infra.logging import get_logger
from ....infra.settings import PlayoutSettings, get_settings


def format_json_output(result: dict[str, Any]) -> str:
    return json.dumps(result, indent=2, default=str)


def emit(result: dict[str, Any], json_output: bool, human_lines: list[str]) -> None:
    """Print ``result`` as JSON or the given human-readable lines."""
    if json_output:
        typer.echo(format_json_output(result))
    else:
        for line in human_lines:
            typer.echo(line)


def exit_with_error(error: PlayoutBootstrapError, json_output: bool = False) -> NoReturn:
    """Report ``error`` and exit with its exit code."""
    get_logger(__name__).error(
        "command_failed", error_type=type(error).__name__, error=str(error)
    )
    if json_output:
        typer.echo(
            format_json_output(
                {"status": "error", "error_type": type(error).__name__, "errors": [str(error)]}
            )
        )
    else:
        typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(error.exit_code)


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in error.errors()
    )


def load_settings(json_output: bool = False, **overrides: Any) -> PlayoutSettings:
    """
    Load settings and apply command-line overrides.

    Overrides set to None are ignored. Invalid settings exit with the
    configuration error code.
    """
    try:
        settings = get_settings()
        overrides = {k: v for k, v in overrides.items() if v is not None}
        if overrides:
            settings = PlayoutSettings.model_validate({**settings.model_dump(), **overrides})
        return settings
    except ValidationError as e:
        exit_with_error(ConfigurationError(f"Invalid settings: {_describe(e)}"), json_output)
