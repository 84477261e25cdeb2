from __future__ import annotations

import subprocess
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from .logging import get_logger

# Period of time the executable is allowed to run before the attempt is aborted
DEFAULT_TIMEOUT_MS = 30_000

# How long to wait for the output readers to drain after the process has gone
_READER_JOIN_TIMEOUT_SEC = 5.0

_log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """
    Outcome of a single run of an executable.

    Attributes:
        exit_code: Signed exit code. Meaningless when `timed_out` is True.
        output: Combined stdout and stderr text, one line per captured line.
        timed_out: True if the process was killed because it did not exit in time.
    """

    exit_code: int
    output: str
    timed_out: bool = False


class _OutputBuffer:
    """Append-only line buffer shared by the stdout and stderr readers."""

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._lock = threading.Lock()
        self._closed = False

    def append(self, line: str) -> None:
        with self._lock:
            if not self._closed:
                self._lines.append(line)

    def close(self) -> str:
        """Stop accepting lines and return the captured text."""
        with self._lock:
            self._closed = True
            return "".join(line + "\n" for line in self._lines)


def _pump(stream: IO[str], buffer: _OutputBuffer) -> None:
    """Copy lines from one pipe into the buffer until the pipe is closed."""
    try:
        for line in stream:
            buffer.append(line.rstrip("\r\n"))
    except (OSError, ValueError):
        # Pipe closed underneath us after a kill
        pass
    finally:
        # Each pipe is closed by its own reader only
        stream.close()


def _start_reader(stream: IO[str] | None, buffer: _OutputBuffer, name: str) -> threading.Thread:
    t = threading.Thread(target=_pump, args=(stream, buffer), name=name, daemon=True)
    if stream is not None:
        t.start()
    return t


def _join_readers(readers: list[threading.Thread]) -> None:
    deadline = time.monotonic() + _READER_JOIN_TIMEOUT_SEC
    for t in readers:
        if t.is_alive():
            t.join(timeout=max(0.0, deadline - time.monotonic()))
    if any(t.is_alive() for t in readers):
        _log.debug("Output pipes still held open by another process, not waiting for them")


def signed_exit_code(code: int) -> int:
    """
    Convert an unsigned 32-bit exit code (as reported on Windows) to its signed value.

    Codes already within the signed range are returned unchanged.
    """
    if code > 0x7FFFFFFF:
        return code - (1 << 32)
    return code


def execute(
    executable: str | Path,
    working_directory: str | Path,
    argument: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> ExecutionResult:
    """
    Run `executable argument` and capture its combined output.

    Output still buffered in pipes that a descendant of the process keeps open is
    waited for only briefly; such a descendant never delays the return.

    Args:
        executable: Path to the executable to run.
        working_directory: Directory the process is started in.
        argument: The single command-line argument passed to the executable.
        timeout_ms: Maximum wall-clock time to wait for the process to exit.

    Returns:
        ExecutionResult: Exit code, captured output and the timeout flag.

    Raises:
        OSError: If the process could not be started.
    """
    args = [str(executable), argument]
    buffer = _OutputBuffer()

    _log.debug(
        "Starting process",
        action="process_start",
        cmd=" ".join(args),
        cwd=str(working_directory),
        timeout_ms=timeout_ms,
    )

    # No context manager: Popen.__exit__ would close pipes a reader may still be blocked on
    proc = subprocess.Popen(
        args,
        cwd=str(working_directory),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
        creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0),
    )
    # Readers must be running before we block on the exit, or a full pipe stalls the child
    readers = [
        _start_reader(proc.stdout, buffer, "azemu-stdout"),
        _start_reader(proc.stderr, buffer, "azemu-stderr"),
    ]
    timed_out = False
    try:
        try:
            returncode = proc.wait(timeout=timeout_ms / 1000)
        except subprocess.TimeoutExpired:
            _log.warning(
                "Process did not exit in time, killing it",
                action="process_timeout",
                pid=proc.pid,
                timeout_ms=timeout_ms,
            )
            proc.kill()
            returncode = proc.wait()
            timed_out = True
        except BaseException:
            proc.kill()
            proc.wait()
            raise
    finally:
        _join_readers(readers)

    output = buffer.close()
    if timed_out:
        return ExecutionResult(exit_code=returncode, output=output, timed_out=True)

    exit_code = signed_exit_code(returncode)
    _log.debug("Process exited", action="process_exit", pid=proc.pid, exit_code=exit_code)
    return ExecutionResult(exit_code=exit_code, output=output)
