from __future__ import annotations

import os
from typing import Any

from azemu.utils.logging import current_log_path

# Number of trailing log lines attached to a failed test
_LOG_TAIL_LINES = 200


def pytest_runtest_makereport(item: Any, call: Any) -> None:
    """
    Pytest hook: called after each test phase (setup, call, teardown).

    When the main test phase (call) fails, attaches the tail of the emulator log
    as an extra report section to speed up debugging.
    """
    try:
        if getattr(call, "when", None) != "call":
            return
        if getattr(call, "excinfo", None) is None:
            return

        path = current_log_path()
        content = ""
        try:
            if os.path.exists(path):
                with open(path, encoding="utf-8", errors="ignore") as f:
                    lines = f.readlines()
                    content = "".join(lines[-_LOG_TAIL_LINES:])
        except Exception:
            content = ""

        if content:
            item.add_report_section("call", "azemu log", content)
    except Exception:
        # Never fail due to errors inside the hook itself
        pass
