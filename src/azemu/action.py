from enum import Enum


class EmulatorAction(str, Enum):
    """
    Actions that can be performed by the Azure Storage Emulator command line tool.

    Every member except UNKNOWN maps to exactly one command-line token.
    UNKNOWN is a sentinel for uninitialized values and is rejected before execution.
    """

    UNKNOWN = "unknown"
    STATUS = "status"
    START = "start"
    STOP = "stop"
    CLEAR = "clear"
    INIT = "init"

    @property
    def argument(self) -> str:
        """
        Command-line token passed to the emulator executable.

        Raises:
            ValueError: If the action is UNKNOWN.
        """
        if self is EmulatorAction.UNKNOWN:
            raise ValueError("'action' contained 'Unknown'.")
        return self.value
