from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from azemu.config.loader import load_settings
from azemu.config.models import Settings


def test_load_settings_yaml_and_env_override(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """
    Settings are loaded from YAML and environment variables take precedence.

    Steps:
    1. Create a temporary YAML configuration file.
    2. Override the timeout and autostart via environment variables.
    3. Verify that environment variables win and other YAML values survive.
    """
    cfg = tmp_path / "cfg.yaml"
    cfg.write_text(
        dedent(
            """
            emulator:
              sdk_path: D:/Azure
              timeout_ms: 5000
            autostart:
              shutdown: true
            """
        ),
        encoding="utf-8",
    )

    monkeypatch.setenv("AZEMU_EMULATOR__TIMEOUT_MS", "1234")
    monkeypatch.setenv("AZEMU_AUTOSTART__ENABLED", "false")

    s: Settings = load_settings(str(cfg))

    assert s.emulator.timeout_ms == 1234  # env overrides YAML
    assert s.emulator.sdk_path == "D:/Azure"  # comes from YAML
    assert s.autostart.enabled is False
    assert s.autostart.shutdown is True


def test_load_settings_missing_file_gives_defaults(tmp_path: Path) -> None:
    s = load_settings(str(tmp_path / "absent.yaml"))

    assert s.emulator.sdk_path is None
    assert s.emulator.directory_name == "Storage Emulator"
    assert s.emulator.executable_name == "AzureStorageEmulator.exe"
    assert s.emulator.timeout_ms == 30_000
    assert s.autostart.enabled is True
    assert s.autostart.shutdown is False


def test_load_settings_empty_file(tmp_path: Path) -> None:
    cfg = tmp_path / "empty.yaml"
    cfg.write_text("", encoding="utf-8")

    assert load_settings(str(cfg)).emulator.timeout_ms == 30_000
