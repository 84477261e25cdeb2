from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from ..config.models import EmulatorSettings, Settings
from ..utils.logging import get_logger

_log = get_logger(__name__)


def default_sdk_path() -> Path:
    r"""Azure SDK root of a standard install: %ProgramFiles(x86)%\Microsoft SDKs\Azure."""
    return Path(os.getenv("ProgramFiles(x86)", "")) / "Microsoft SDKs" / "Azure"


@dataclass(frozen=True, slots=True)
class EmulatorLocation:
    """
    Where the Azure Storage Emulator lives on disk, and which parts of it were found.
    """

    sdk_path: Path
    directory: Path
    executable: Path
    is_sdk_present: bool
    is_directory_present: bool
    is_executable_present: bool

    @classmethod
    def from_settings(cls, settings: Settings | EmulatorSettings | None = None) -> EmulatorLocation:
        """
        Resolve the emulator paths from configuration and check what exists.

        Logs a warning for every expected item that is missing.
        """
        if isinstance(settings, Settings):
            settings = settings.emulator
        settings = settings or EmulatorSettings()

        sdk_path = Path(settings.sdk_path) if settings.sdk_path else default_sdk_path()
        sdk_path = sdk_path.absolute()
        directory = sdk_path / settings.directory_name
        executable = directory / settings.executable_name

        location = cls(
            sdk_path=sdk_path,
            directory=directory,
            executable=executable,
            is_sdk_present=sdk_path.is_dir(),
            is_directory_present=directory.is_dir(),
            is_executable_present=executable.is_file(),
        )

        if not location.is_sdk_present:
            _log.warning("Unable to find Azure SDK", path=str(sdk_path))
        if not location.is_directory_present:
            _log.warning(
                "Unable to find Storage Emulator directory in Azure SDK", path=str(directory)
            )
        if not location.is_executable_present:
            _log.warning(
                "Unable to find Storage Emulator executable in Azure SDK", path=str(executable)
            )
        return location
