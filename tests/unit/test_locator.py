from __future__ import annotations

from pathlib import Path

import pytest

from azemu.config.models import EmulatorSettings, Settings
from azemu.emulator.locator import EmulatorLocation, default_sdk_path


def test_default_sdk_path_uses_program_files(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ProgramFiles(x86)", "/opt/pf86")

    assert default_sdk_path() == Path("/opt/pf86") / "Microsoft SDKs" / "Azure"


def test_location_found(tmp_path: Path) -> None:
    """A full install is detected from a configured SDK path."""
    exe = tmp_path / "Storage Emulator" / "AzureStorageEmulator.exe"
    exe.parent.mkdir()
    exe.write_bytes(b"")

    loc = EmulatorLocation.from_settings(Settings(emulator={"sdk_path": str(tmp_path)}))

    assert loc.sdk_path == tmp_path.absolute()
    assert loc.directory == tmp_path.absolute() / "Storage Emulator"
    assert loc.executable == exe.absolute()
    assert loc.is_sdk_present
    assert loc.is_directory_present
    assert loc.is_executable_present


def test_location_missing_executable(tmp_path: Path) -> None:
    (tmp_path / "Storage Emulator").mkdir()

    loc = EmulatorLocation.from_settings(EmulatorSettings(sdk_path=str(tmp_path)))

    assert loc.is_sdk_present
    assert loc.is_directory_present
    assert not loc.is_executable_present


def test_location_custom_names(tmp_path: Path) -> None:
    exe = tmp_path / "emu" / "emu.exe"
    exe.parent.mkdir()
    exe.write_bytes(b"")

    loc = EmulatorLocation.from_settings(
        EmulatorSettings(sdk_path=str(tmp_path), directory_name="emu", executable_name="emu.exe")
    )

    assert loc.executable == exe.absolute()
    assert loc.is_executable_present


def test_location_nothing_installed(tmp_path: Path) -> None:
    loc = EmulatorLocation.from_settings(EmulatorSettings(sdk_path=str(tmp_path / "none")))

    assert not loc.is_sdk_present
    assert not loc.is_directory_present
    assert not loc.is_executable_present
