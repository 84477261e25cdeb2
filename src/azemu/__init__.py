from .action import EmulatorAction
from .emulator.base import EmulatorManager
from .emulator.locator import EmulatorLocation
from .emulator.manager import StorageEmulator, start_emulator_if_required
from .emulator.status import EmulatorSession, Status
from .utils.cli import ExecutionResult, execute

__all__ = [
    "EmulatorAction",
    "EmulatorLocation",
    "EmulatorManager",
    "EmulatorSession",
    "ExecutionResult",
    "Status",
    "StorageEmulator",
    "execute",
    "start_emulator_if_required",
]
