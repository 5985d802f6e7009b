"""
Config command group: inspect the effective bootstrap settings.
"""

from __future__ import annotations

import typer

from ._ops import emit, load_settings

app = typer.Typer(name="config", help="Effective settings inspection")


@app.command("show")
def show(
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Print every recognized option with its effective value.

    Passwords are shown masked.
    """
    settings = load_settings(json_output)
    values = settings.model_dump(mode="json")
    values["marker_path"] = str(settings.marker_path)
    emit(values, json_output, [f"{key} = {value}" for key, value in values.items()])
