from __future__ import annotations

from abc import ABC, abstractmethod

from ..action import EmulatorAction
from .status import Status


class EmulatorManager(ABC):
    """
    Abstract base class for emulator managers.

    Implementations only have to run a single action; the check-then-act
    helpers are built on top of that.
    """

    @abstractmethod
    def run(self, action: EmulatorAction) -> Status:
        """
        Perform one action against the emulator and report the outcome.

        Implementations must encode every failure in the returned Status.
        """
        ...

    def ensure_started(self) -> Status:
        """
        Start the emulator unless it already reports itself as running.

        Returns:
            Status: The status call if it was already running, otherwise the start call.
        """
        status = self.run(EmulatorAction.STATUS)
        if status.running is True:
            return status
        return self.run(EmulatorAction.START)

    def ensure_stopped(self) -> Status:
        """
        Stop the emulator unless it already reports itself as stopped.

        Returns:
            Status: The status call if it was already stopped, otherwise the stop call.
        """
        status = self.run(EmulatorAction.STATUS)
        if status.running is False:
            return status
        return self.run(EmulatorAction.STOP)
