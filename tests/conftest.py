from __future__ import annotations

from pathlib import Path

import pytest

pytest_plugins = ["pytester"]


@pytest.fixture(autouse=True)
def _isolated_log_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the JSON-lines log file of every test inside its own tmp directory."""
    monkeypatch.setenv("AZEMU_LOG_DIR", str(tmp_path / "logs"))
