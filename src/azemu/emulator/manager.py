from __future__ import annotations

import os
from collections.abc import Callable

from ..action import EmulatorAction
from ..config.models import Settings
from ..utils.cli import ExecutionResult, execute
from ..utils.logging import bind_context, get_logger, unbind_context
from . import parser
from .base import EmulatorManager
from .locator import EmulatorLocation
from .status import EmulatorSession, Status

Runner = Callable[[str, str, str, int], ExecutionResult]


class StorageEmulator(EmulatorManager):
    """
    Drives the Azure Storage Emulator command line tool.

    Each public call runs the tool once and returns an immutable Status. Version and
    endpoints are remembered in `session` so calls that do not report them (such as
    "stop") still carry the last known values.
    """

    def __init__(
        self,
        location: EmulatorLocation | None = None,
        *,
        settings: Settings | None = None,
        session: EmulatorSession | None = None,
        runner: Runner | None = None,
    ) -> None:
        """
        Args:
            location: Emulator paths. Resolved from `settings` when not given.
            settings: Configuration; defaults (plus environment) when not given.
            session: Last-known values to start from.
            runner: Callable with the signature of `azemu.utils.cli.execute`.
        """
        self.settings = settings or Settings()
        self.location = location or EmulatorLocation.from_settings(self.settings)
        self.session = session or EmulatorSession()
        self.timeout_ms = self.settings.emulator.timeout_ms
        self._runner: Runner = runner or execute
        self._log = get_logger(__name__)

    @property
    def version(self) -> str | None:
        return self.session.version

    @property
    def blob_endpoint(self) -> str | None:
        return self.session.blob_endpoint

    @property
    def queue_endpoint(self) -> str | None:
        return self.session.queue_endpoint

    @property
    def table_endpoint(self) -> str | None:
        return self.session.table_endpoint

    def run(self, action: EmulatorAction) -> Status:
        """
        Run the emulator tool with the token for `action`.

        Raises:
            ValueError: If `action` is EmulatorAction.UNKNOWN.
        """
        argument = action.argument
        executable = self.location.executable

        if not self.location.is_executable_present:
            self._log.error(
                "Azure Storage Emulator is not installed",
                action=action.value,
                executable=str(executable),
            )
            return parser.not_installed(action, executable)

        bind_context(action=action, executable=executable)
        try:
            self._log.info("Running Azure Storage Emulator", timeout_ms=self.timeout_ms)
            try:
                result = self._runner(
                    str(executable), str(self.location.directory), argument, self.timeout_ms
                )
            except OSError as e:
                self._log.error("Unable to run Azure Storage Emulator", error=str(e))
                return parser.failure(
                    action, self.session, f"Unable to run {executable.name}: {e}"
                )

            status = parser.interpret(
                action, self.session, result, executable_name=executable.name
            )
            self._log.info(
                "Azure Storage Emulator finished",
                success=status.success,
                running=status.running,
                warning=status.warning,
            )
            return status
        finally:
            unbind_context()

    def run_status(self) -> Status:
        """Get the current status of the emulator."""
        return self.run(EmulatorAction.STATUS)

    def run_start(self) -> Status:
        return self.run(EmulatorAction.START)

    def run_stop(self) -> Status:
        return self.run(EmulatorAction.STOP)

    def run_clear(self) -> Status:
        """Delete all data in the emulator."""
        return self.run(EmulatorAction.CLEAR)

    def run_init(self) -> Status:
        """Initialize the emulator database and configuration."""
        return self.run(EmulatorAction.INIT)


def start_emulator_if_required(
    settings: Settings | None = None,
    *,
    is_in_azure: bool | None = None,
    manager: EmulatorManager | None = None,
) -> bool | None:
    """
    Start the emulator on a developer machine if it is not already running.

    Nothing is done (and None returned) when running inside Azure, in CI, or when
    autostart is disabled in the settings.

    Returns:
        bool | None: Running state after the attempt; None if skipped or unknown.
    """
    log = get_logger(__name__)
    settings = settings or Settings()

    if is_in_azure or os.getenv("CI") == "true" or not settings.autostart.enabled:
        log.debug("Skipping Azure Storage Emulator autostart", is_in_azure=is_in_azure)
        return None

    mgr = manager or StorageEmulator(settings=settings)
    status = mgr.ensure_started()
    if status.running is None:
        log.warning("Unable to determine whether Azure Storage Emulator has started")
    else:
        log.info(
            f"Azure Storage Emulator has {'' if status.running else 'NOT '}started",
            action=status.action.value,
            running=status.running,
        )
    return status.running
