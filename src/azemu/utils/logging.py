from __future__ import annotations

import json
import os
import threading
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any, TextIO

import structlog
from structlog.contextvars import (
    bind_contextvars,
    clear_contextvars,
    merge_contextvars,
    unbind_contextvars,
)

_LOG_FILE_NAME = "azemu.log"

# Context keys that will be automatically included into log records
_CONTEXT_KEYS = ("action", "executable", "test")


def _log_dir() -> Path:
    """Directory for the JSON-lines log file (AZEMU_LOG_DIR, default artifacts/logs)."""
    return Path(os.getenv("AZEMU_LOG_DIR", "artifacts/logs"))


def _ensure_log_dir() -> None:
    try:
        _log_dir().mkdir(parents=True, exist_ok=True)
    except Exception:
        pass


def _level_from_env() -> int:
    """Get log level from AZEMU_LOG_LEVEL (TRACE|DEBUG|INFO|WARNING|ERROR)."""
    import logging

    raw = os.getenv("AZEMU_LOG_LEVEL", "INFO").upper()
    if raw == "TRACE":
        # Level below DEBUG
        return 5
    return getattr(logging, raw, logging.INFO)


_file_lock = threading.RLock()


def _copy_event_to_message(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> Mapping[str, Any]:
    if "event" in event_dict and "message" not in event_dict:
        event_dict["message"] = event_dict["event"]
    return event_dict


def _drop_none_values(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> Mapping[str, Any]:
    return {k: v for k, v in event_dict.items() if v is not None}


def _file_sink_processor(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Duplicate every record as one JSON line into <log dir>/azemu.log."""
    _ensure_log_dir()

    line = json.dumps(event_dict, ensure_ascii=False, default=str)
    try:
        with _file_lock:
            with current_log_path().open("a", encoding="utf-8") as f:
                f.write(line + "\n")
    except Exception:
        # Never break execution because of log write issues
        pass

    return event_dict


def current_log_path() -> Path:
    """Return the path of the JSON-lines log file."""
    return _log_dir() / _LOG_FILE_NAME


def bind_context(
    *,
    action: Any | None = None,
    executable: Any | None = None,
    test_name: str | None = None,
) -> None:
    """
    Bind emulator action/executable/test info into the logging context.

    The values are then included in all structured log records until cleared.
    """
    if action is not None:
        action = getattr(action, "value", action)
    if executable is not None:
        executable = str(executable)
    values = dict(zip(_CONTEXT_KEYS, (action, executable, test_name)))
    bind_contextvars(**{k: v for k, v in values.items() if v is not None})


def unbind_context() -> None:
    """Remove the action/executable keys bound by bind_context(), keeping the test name."""
    unbind_contextvars("action", "executable")


_CONFIGURED = False


def setup_logging(stream: TextIO | None = None) -> None:
    """
    Centralized setup of structured logging with JSON output and file duplication.

    Includes:
    - Log level from AZEMU_LOG_LEVEL
    - ISO 8601 timestamp (key: "timestamp")
    - Context (action, executable, test) via contextvars
    - Duplication of each record into <AZEMU_LOG_DIR>/azemu.log
    - JSON printed to `stream` (stdout when not given)

    Calling it again is a no-op unless a stream is given, which reconfigures output.
    """
    import logging

    global _CONFIGURED
    if _CONFIGURED and stream is None:
        return

    _ensure_log_dir()

    level = _level_from_env()

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            structlog.processors.CallsiteParameterAdder(
                [structlog.processors.CallsiteParameter.MODULE]
            ),
            _copy_event_to_message,
            _drop_none_values,
            _file_sink_processor,
            structlog.processors.JSONRenderer(default=str),
        ],
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        # Not cached: a print logger built without a stream binds sys.stdout as of its creation
        cache_logger_on_first_use=False,
    )

    # Sync root logging level (for third-party libraries)
    logging.getLogger().setLevel(level)

    _CONFIGURED = True


def get_logger(name: str | None = None) -> Any:
    """
    Get a structlog logger instance.

    Ensures logging is configured even when nothing called setup_logging() first.
    """
    if not globals().get("_CONFIGURED", False):
        try:
            setup_logging()
        except Exception:
            pass
    return structlog.get_logger(name or __name__)


__all__ = [
    "setup_logging",
    "bind_context",
    "unbind_context",
    "current_log_path",
    "get_logger",
    "clear_contextvars",
]
