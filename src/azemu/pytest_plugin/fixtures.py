from __future__ import annotations

from collections.abc import Generator

import pytest

from ..config.loader import load_settings
from ..config.models import Settings
from ..emulator.manager import StorageEmulator
from ..utils.logging import bind_context, clear_contextvars, get_logger, setup_logging

_logger = get_logger(__name__)


@pytest.fixture(scope="session")
def azemu_settings(pytestconfig: pytest.Config) -> Settings:
    """
    Load emulator configuration once per session.

    Supports overriding the configuration file path and disabling autostart
    via command-line options:
      --azemu-config <path>
      --azemu-no-autostart
    """
    cfg_path: str | None = pytestconfig.getoption("--azemu-config")
    s: Settings = load_settings(cfg_path)
    if pytestconfig.getoption("--azemu-no-autostart"):
        s.autostart.enabled = False
    return s


@pytest.fixture(scope="session")
def storage_emulator(azemu_settings: Settings) -> Generator[StorageEmulator, None, None]:
    """
    Provide a running Azure Storage Emulator for the test session.

    - Skips the requesting tests if the emulator is not installed.
    - Starts the emulator if autostart is enabled and it is not already running.
    - Stops it at session end only if it was started here and shutdown is enabled.
    """
    emulator = StorageEmulator(settings=azemu_settings)
    if not emulator.location.is_executable_present:
        pytest.skip(f"Azure Storage Emulator is not installed: {emulator.location.executable}")

    started_by_us = False
    if azemu_settings.autostart.enabled:
        status = emulator.run_status()
        if status.running is not True:
            status = emulator.run_start()
            started_by_us = status.success and status.warning is None
            if not status.success:
                _logger.error("Azure Storage Emulator did not start", error=status.error)
    try:
        yield emulator
    finally:
        if started_by_us and azemu_settings.autostart.shutdown:
            _logger.info("Stopping Azure Storage Emulator (started by the test session)")
            emulator.run_stop()


@pytest.fixture(scope="session", autouse=True)
def _setup_structlog() -> None:
    """One-time structured logging setup for the entire test session."""
    setup_logging()


@pytest.fixture(autouse=True)
def _bind_test_logging_context(request: pytest.FixtureRequest) -> Generator[None, None, None]:
    """
    Bind the test name to the logging context.

    Updates contextvars at the start of each test and clears them afterwards.
    """
    try:
        bind_context(test_name=request.node.name)
    except Exception:
        pass
    try:
        yield
    finally:
        try:
            clear_contextvars()
        except Exception:
            pass
