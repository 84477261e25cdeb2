from __future__ import annotations

import pytest

from azemu.action import EmulatorAction


def test_action_arguments() -> None:
    """Every real action maps to exactly one command-line token."""
    assert EmulatorAction.STATUS.argument == "status"
    assert EmulatorAction.START.argument == "start"
    assert EmulatorAction.STOP.argument == "stop"
    assert EmulatorAction.CLEAR.argument == "clear"
    assert EmulatorAction.INIT.argument == "init"


def test_unknown_action_fails_fast() -> None:
    """The UNKNOWN sentinel has no token and must be rejected."""
    with pytest.raises(ValueError):
        _ = EmulatorAction.UNKNOWN.argument


def test_action_string_coercion() -> None:
    """Actions can be built from their token, as the CLI does."""
    assert EmulatorAction("start") is EmulatorAction.START
    assert isinstance(EmulatorAction.STOP, str)
    assert {a.argument for a in EmulatorAction if a is not EmulatorAction.UNKNOWN} == {
        "status",
        "start",
        "stop",
        "clear",
        "init",
    }
