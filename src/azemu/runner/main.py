from __future__ import annotations

import sys
from collections.abc import Callable

import typer

from ..action import EmulatorAction
from ..config.loader import load_settings
from ..emulator.manager import StorageEmulator
from ..emulator.status import Status
from ..utils.logging import setup_logging

# Create a CLI application using Typer
app = typer.Typer(add_completion=False, help="Control the Azure Storage Emulator.")

ConfigOption = typer.Option(None, "--config", help="Path to the YAML configuration file")
TimeoutOption = typer.Option(
    None, "--timeout-ms", min=1, help="Kill the emulator tool after this many milliseconds"
)
JsonOption = typer.Option(True, "--json/--text", help="Print the status as JSON or plain text")


def _build_emulator(config: str | None, timeout_ms: int | None) -> StorageEmulator:
    # Logs go to stderr so stdout carries only the status
    setup_logging(stream=sys.stderr)
    settings = load_settings(config)
    if timeout_ms:
        settings.emulator.timeout_ms = timeout_ms
    return StorageEmulator(settings=settings)


def _render(status: Status, as_json: bool) -> str:
    if as_json:
        return status.model_dump_json(indent=2)
    data = status.model_dump(mode="json")
    return "\n".join(f"{key}: {'' if value is None else value}" for key, value in data.items())


def _report(
    call: Callable[[StorageEmulator], Status],
    config: str | None,
    timeout_ms: int | None,
    as_json: bool,
) -> None:
    """Run one call against the emulator, print its status and exit 0 on success, 1 otherwise."""
    status = call(_build_emulator(config, timeout_ms))
    typer.echo(_render(status, as_json))
    raise typer.Exit(code=0 if status.success else 1)


def _action_command(action: EmulatorAction, help_text: str) -> None:
    def command(
        config: str = ConfigOption,
        timeout_ms: int = TimeoutOption,
        as_json: bool = JsonOption,
    ) -> None:
        _report(lambda emulator: emulator.run(action), config, timeout_ms, as_json)

    app.command(name=action.value, help=help_text)(command)


_action_command(EmulatorAction.STATUS, "Show whether the emulator is running and its endpoints.")
_action_command(EmulatorAction.START, "Start the emulator.")
_action_command(EmulatorAction.STOP, "Stop the emulator.")
_action_command(EmulatorAction.CLEAR, "Delete all data in the emulator.")
_action_command(EmulatorAction.INIT, "Initialize the emulator database and configuration.")


@app.command("ensure-started")
def ensure_started(
    config: str = ConfigOption,
    timeout_ms: int = TimeoutOption,
    as_json: bool = JsonOption,
) -> None:
    """Start the emulator unless it is already running."""
    _report(StorageEmulator.ensure_started, config, timeout_ms, as_json)


@app.command("ensure-stopped")
def ensure_stopped(
    config: str = ConfigOption,
    timeout_ms: int = TimeoutOption,
    as_json: bool = JsonOption,
) -> None:
    """Stop the emulator unless it is already stopped."""
    _report(StorageEmulator.ensure_stopped, config, timeout_ms, as_json)


if __name__ == "__main__":
    app()
