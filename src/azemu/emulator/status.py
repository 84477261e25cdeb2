from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, model_validator

from ..action import EmulatorAction


@dataclass(slots=True)
class EmulatorSession:
    """
    Last-known values reported by the emulator, carried across invocations.

    Fields are only ever overwritten by newly parsed values and never cleared.
    The running state is deliberately not kept here: it is only valid for the
    invocation that reported it.
    """

    version: str | None = None
    blob_endpoint: str | None = None
    queue_endpoint: str | None = None
    table_endpoint: str | None = None


class Status(BaseModel):
    """
    Immutable snapshot of one invocation of the emulator command line tool.

    Attributes:
      - action: The action that was performed.
      - installed: Whether the emulator executable was found.
      - success: Whether the call completed without error.
      - running: True/False if the emulator definitely is/isn't running, None if unknown.
      - version: Version of the emulator ("5.10.0.0"), possibly from an earlier call.
      - blob_endpoint / queue_endpoint / table_endpoint: Endpoint URLs as printed by the tool,
        possibly from an earlier call.
      - output: Everything the tool printed, if it exited on its own.
      - error: Why the call failed, if it did.
      - warning: Recoverable issues, multiple joined with "; ".
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    action: EmulatorAction
    installed: bool = True
    success: bool = False
    running: bool | None = None
    version: str | None = None
    blob_endpoint: str | None = None
    queue_endpoint: str | None = None
    table_endpoint: str | None = None
    output: str | None = None
    error: str | None = None
    warning: str | None = None

    @model_validator(mode="after")
    def _error_means_failure(self) -> Status:
        if self.error and self.success:
            raise ValueError("a Status carrying an error cannot be successful")
        return self
