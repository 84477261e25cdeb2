"""
Turns the raw result of running the emulator tool into a Status.

A successful run prints a fixed, line-positional report, for example::

    Windows Azure Storage Emulator 5.10.0.0 command line tool
    IsRunning: True
    BlobEndpoint: http://127.0.0.1:10000/
    QueueEndpoint: http://127.0.0.1:10001/
    TableEndpoint: http://127.0.0.1:10002/
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from ..action import EmulatorAction
from ..utils.cli import ExecutionResult
from ..utils.logging import get_logger
from .status import EmulatorSession, Status

EMULATOR_EXE_NAME = "AzureStorageEmulator.exe"

# Exit codes of AzureStorageEmulator.exe. These come from the tool itself and are not
# documented; newer emulator releases may report them differently.
EXIT_ALREADY_RUNNING = -5  # "start" while already running
EXIT_ALREADY_STOPPED = -6  # "stop" while already stopped

ALREADY_RUNNING_WARNING = "Azure storage emulator already in a running state."
ALREADY_STOPPED_WARNING = "Azure storage emulator already in a stopped state."

_STICKY_FIELDS = ("version", "blob_endpoint", "queue_endpoint", "table_endpoint")

_logger = get_logger(__name__)


def _parse_bool(token: str) -> bool | None:
    return {"True": True, "False": False}.get(token)


def _parse_absolute_url(value: str) -> str | None:
    parsed = urlparse(value)
    if parsed.scheme and parsed.netloc:
        return value
    return None


@dataclass(frozen=True, slots=True)
class LineRule:
    """
    Expected content of the output line at `position`.

    `convert` receives the first group of `pattern` and returns the field value,
    or None when the text does not describe a valid value.
    """

    position: int
    field: str
    pattern: re.Pattern[str]
    convert: Callable[[str], Any]

    def read(self, line: str) -> Any | None:
        m = self.pattern.match(line)
        if m is None:
            return None
        return self.convert(m.group(1))


STATUS_SCHEMA: tuple[LineRule, ...] = (
    LineRule(
        0,
        "version",
        re.compile(
            r"^Windows Azure Storage Emulator ([0-9]+\.[0-9]+\.[0-9]+\.[0-9]+) command line tool$"
        ),
        str,
    ),
    LineRule(1, "running", re.compile(r"^IsRunning: ([A-Z][a-z]+)$"), _parse_bool),
    LineRule(2, "blob_endpoint", re.compile(r"^BlobEndpoint: (.+)$"), _parse_absolute_url),
    LineRule(3, "queue_endpoint", re.compile(r"^QueueEndpoint: (.+)$"), _parse_absolute_url),
    LineRule(4, "table_endpoint", re.compile(r"^TableEndpoint: (.+)$"), _parse_absolute_url),
)

_RULES_BY_POSITION = {rule.position: rule for rule in STATUS_SCHEMA}


def _join_warnings(warnings: list[str]) -> str | None:
    return "; ".join(warnings) if warnings else None


def parse_output(output: str) -> tuple[dict[str, Any], list[str]]:
    """
    Read the positional status report.

    Returns:
        The fields that were recognised (keyed by field name) and one warning per
        line found past the end of the schema.
    """
    fields: dict[str, Any] = {}
    warnings: list[str] = []
    lines = [line for line in re.split(r"\r?\n", output) if line]
    for index, line in enumerate(lines):
        rule = _RULES_BY_POSITION.get(index)
        if rule is not None:
            value = rule.read(line)
            if value is not None:
                fields[rule.field] = value
        else:
            warnings.append(f"Unexpected results on line {index + 1}: {line}")
    return fields, warnings


def _sticky(session: EmulatorSession) -> dict[str, Any]:
    return {name: getattr(session, name) for name in _STICKY_FIELDS}


def not_installed(action: EmulatorAction, executable_path: str | Path) -> Status:
    """Status for an emulator that could not be found; nothing was executed."""
    return Status(
        action=action,
        installed=False,
        success=False,
        error=(
            "Azure Storage Emulator was not found to be installed at the expected "
            f'location: "{executable_path}".'
        ),
    )


def failure(
    action: EmulatorAction,
    session: EmulatorSession,
    message: str,
    output: str | None = None,
) -> Status:
    """Status for a call that could not be completed, keeping last-known values."""
    return Status(action=action, success=False, error=message, output=output, **_sticky(session))


def interpret(
    action: EmulatorAction,
    session: EmulatorSession,
    result: ExecutionResult,
    executable_name: str = EMULATOR_EXE_NAME,
) -> Status:
    """
    Map the result of one run of the emulator tool to a Status.

    Version and endpoints found in the output are stored in `session`; those that
    were not reported this time are taken from it. The running state only ever
    comes from this run.
    """
    if result.timed_out:
        _logger.error("Emulator timed out", action=action.value, executable=executable_name)
        return failure(
            action,
            session,
            f"Process timed-out waiting for a response from {executable_name}.",
        )

    output = result.output
    if result.exit_code != 0:
        if action is EmulatorAction.START and result.exit_code == EXIT_ALREADY_RUNNING:
            return Status(
                action=action,
                success=True,
                running=True,
                output=output,
                warning=ALREADY_RUNNING_WARNING,
                **_sticky(session),
            )
        if action is EmulatorAction.STOP and result.exit_code == EXIT_ALREADY_STOPPED:
            return Status(
                action=action,
                success=True,
                running=False,
                output=output,
                warning=ALREADY_STOPPED_WARNING,
                **_sticky(session),
            )

        message = f"{executable_name} exited with a non-zero error code: {result.exit_code}."
        if output:
            message += f"  Output: {output}."
        _logger.error(
            "Emulator exited with an error",
            action=action.value,
            exit_code=result.exit_code,
        )
        return failure(action, session, message, output=output)

    fields, warnings = parse_output(output)
    for name in _STICKY_FIELDS:
        if name in fields:
            setattr(session, name, fields[name])
    if warnings:
        _logger.warning("Unexpected emulator output", action=action.value, warnings=warnings)

    return Status(
        action=action,
        success=True,
        running=fields.get("running"),
        output=output,
        warning=_join_warnings(warnings),
        **_sticky(session),
    )
