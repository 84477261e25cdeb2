from __future__ import annotations

import subprocess
import sys
import time
from pathlib import Path

import pytest

from azemu.utils import cli
from azemu.utils.cli import ExecutionResult, execute, signed_exit_code


def _script(tmp_path: Path, body: str) -> str:
    """Write a small Python program to run as the child process."""
    path = tmp_path / "tool.py"
    path.write_text(body, encoding="utf-8")
    return str(path)


def test_execute_captures_stdout_and_stderr(tmp_path: Path) -> None:
    """Both streams end up in the one output buffer, and the exit code is returned."""
    script = _script(
        tmp_path,
        "import sys\n"
        "print('from stdout')\n"
        "print('from stderr', file=sys.stderr)\n"
        "sys.exit(3)\n",
    )

    res = execute(sys.executable, tmp_path, script, timeout_ms=20_000)

    assert isinstance(res, ExecutionResult)
    assert res.exit_code == 3
    assert res.timed_out is False
    assert "from stdout" in res.output
    assert "from stderr" in res.output


def test_execute_runs_in_working_directory(tmp_path: Path) -> None:
    """The child is started in the given working directory."""
    wd = tmp_path / "wd"
    wd.mkdir()
    script = _script(tmp_path, "import os\nprint(os.getcwd())\n")

    res = execute(sys.executable, wd, script, timeout_ms=20_000)

    assert res.exit_code == 0
    assert Path(res.output.strip()).resolve() == wd.resolve()


def test_execute_passes_single_argument(tmp_path: Path) -> None:
    """Only the executable and the one argument make up the command line."""
    script = _script(tmp_path, "import sys\nprint(len(sys.argv))\n")

    res = execute(sys.executable, tmp_path, script, timeout_ms=20_000)

    # sys.argv of the child is [script]
    assert res.output.strip() == "1"


def test_execute_does_not_deadlock_on_large_output(tmp_path: Path) -> None:
    """Output larger than a pipe buffer on both streams is drained while waiting."""
    script = _script(
        tmp_path,
        "import sys\n"
        "for i in range(20000):\n"
        "    print('o' * 80)\n"
        "    print('e' * 80, file=sys.stderr)\n",
    )

    res = execute(sys.executable, tmp_path, script, timeout_ms=60_000)

    assert res.exit_code == 0
    assert res.timed_out is False
    assert len(res.output.splitlines()) == 40000


def test_execute_kills_on_timeout(tmp_path: Path) -> None:
    """A child that outlives the timeout is killed and reported as timed out."""
    script = _script(
        tmp_path,
        "import time\nprint('before sleep', flush=True)\ntime.sleep(60)\n",
    )

    t0 = time.monotonic()
    res = execute(sys.executable, tmp_path, script, timeout_ms=1_500)
    elapsed = time.monotonic() - t0

    assert res.timed_out is True
    assert elapsed < 30
    assert "before sleep" in res.output


def test_execute_missing_executable_raises(tmp_path: Path) -> None:
    """Spawn failures surface as OSError for the caller to handle."""
    with pytest.raises(OSError):
        execute(tmp_path / "missing.exe", tmp_path, "status", timeout_ms=1_000)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(0, 0), (3, 3), (4294967291, -5), (4294967290, -6), (-5, -5)],
)
def test_signed_exit_code(raw: int, expected: int) -> None:
    """Unsigned 32-bit exit codes (as reported on Windows) are converted back to signed."""
    assert signed_exit_code(raw) == expected


_GRANDCHILD_TOOL = (
    "import subprocess, sys, time\n"
    "subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(20)'])\n"
    "print('hi', flush=True)\n"
)


@pytest.mark.parametrize("tail", ["time.sleep(60)\n", ""], ids=["timeout", "exit"])
def test_execute_not_held_by_grandchild_pipes(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, tail: str
) -> None:
    """A descendant that inherits the output pipes does not delay the return."""
    monkeypatch.setattr(cli, "_READER_JOIN_TIMEOUT_SEC", 0.5)
    script = _script(tmp_path, _GRANDCHILD_TOOL + tail)

    t0 = time.monotonic()
    res = execute(sys.executable, tmp_path, script, timeout_ms=3_000)
    elapsed = time.monotonic() - t0

    assert elapsed < 10
    assert "hi" in res.output
    assert res.timed_out is bool(tail)
    if not tail:
        assert res.exit_code == 0


class _Interrupted(Exception):
    pass


def test_execute_kills_child_when_interrupted(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """An exception while waiting kills the child and is re-raised."""
    started: list[subprocess.Popen] = []
    original_wait = subprocess.Popen.wait

    def interrupted_wait(self: subprocess.Popen, timeout: float | None = None) -> int:
        if timeout is not None:
            started.append(self)
            raise _Interrupted()
        return original_wait(self)

    monkeypatch.setattr(subprocess.Popen, "wait", interrupted_wait)
    script = _script(tmp_path, "import time\ntime.sleep(60)\n")

    with pytest.raises(_Interrupted):
        execute(sys.executable, tmp_path, script, timeout_ms=20_000)

    assert len(started) == 1
    assert started[0].poll() is not None
