"""
Server command group: run-time bootstrap of the playout server.

`start` is the container entrypoint. It initializes persistent state on
first launch only, then hands the foreground to the server.
"""

from __future__ import annotations

import typer

from ...infra.exceptions import InitializationError
from ...runtime import Orchestrator, SubprocessServerRunner
from ._ops import emit, exit_with_error, load_settings

app = typer.Typer(name="server", help="Run-time initialization and server start")


def start_server(exec_server: bool | None = None, json_output: bool = False) -> int:
    settings = load_settings(json_output, exec_server=exec_server)
    orchestrator = Orchestrator.from_settings(
        settings, SubprocessServerRunner(exec_mode=settings.exec_server)
    )
    try:
        return orchestrator.run()
    except InitializationError as e:
        exit_with_error(e, json_output)


@app.command("start")
def start(
    exec_server: bool | None = typer.Option(
        None,
        "--exec/--no-exec",
        help="Replace this process with the server (default from PLAYOUT_EXEC_SERVER)",
    ),
):
    """
    Initialize persistent state if needed, then start the server.

    Exits with the server's exit status once it terminates.

    Examples:
        playout-bootstrap server start
        playout-bootstrap server start --no-exec
    """
    raise typer.Exit(start_server(exec_server))


@app.command("init")
def init(
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Run first-run initialization only; do not start the server.

    Does nothing when the state marker already exists.
    """
    settings = load_settings(json_output)
    orchestrator = Orchestrator.from_settings(settings, SubprocessServerRunner(exec_mode=False))
    try:
        ran = orchestrator.ensure_initialized()
    except InitializationError as e:
        exit_with_error(e, json_output)

    result = {
        "status": "ok",
        "initialized": ran,
        "marker": str(settings.marker_path),
    }
    message = "Initialized persistent state" if ran else "Already initialized, nothing to do"
    emit(result, json_output, [f"{message} ({settings.marker_path})"])


@app.command("status")
def status(
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Report whether persistent state is initialized."""
    settings = load_settings(json_output)
    orchestrator = Orchestrator.from_settings(settings, SubprocessServerRunner(exec_mode=False))
    state = orchestrator.current_state()
    result = {
        "state": state.value,
        "marker": str(settings.marker_path),
        "init_lock_held": orchestrator.marker.locked(),
        "binary": str(orchestrator.binary),
        "listen": str(orchestrator.listen),
    }
    lines = [
        f"State:  {state.value}",
        f"Marker: {settings.marker_path}",
        f"Listen: {orchestrator.listen}",
    ]
    if result["init_lock_held"]:
        lines.append(f"Init lock present: {orchestrator.marker.lock_path}")
    emit(result, json_output, lines)
