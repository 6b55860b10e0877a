"""
Logging setup for the envload command line tool.

Library modules only call logging.getLogger(__name__); handlers are installed
here, by the CLI. Structured fields travel in a record's `extra_data` dict:

    logger.debug("read env file", extra={"extra_data": {"path": p, "keys": 3}})
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from typing import IO, Any

ROOT_LOGGER = "envload"

_RESET = "\x1b[0m"
_FAINT = "\x1b[2m"
_LEVEL_COLORS = {
    "DEBUG": "\x1b[94m",
    "INFO": "\x1b[92m",
    "WARNING": "\x1b[93m",
    "ERROR": "\x1b[91m",
    "CRITICAL": "\x1b[91m",
}
_LEVEL_LABELS = {
    "DEBUG": "DEBUG",
    "INFO": "INFO ",
    "WARNING": "WARN ",
    "ERROR": "ERROR",
    "CRITICAL": "ERROR",
}


def _with_source(record: logging.LogRecord) -> str:
    # Only noisy or problematic records carry their call site.
    if record.levelno <= logging.DEBUG or record.levelno >= logging.WARNING:
        return f"{os.path.basename(record.pathname)}:{record.lineno} {record.funcName}()"
    return ""


def _extra(record: logging.LogRecord) -> dict[str, Any]:
    data = getattr(record, "extra_data", None)
    return dict(data) if isinstance(data, dict) else {}


class TextFormatter(logging.Formatter):
    """`Jan  2 15:04:05.000 INFO  [envload.loader] message k=v ...`"""

    def __init__(self, *, use_color: bool = False) -> None:
        super().__init__()
        self.use_color = use_color

    def _faint(self, s: str) -> str:
        return f"{_FAINT}{s}{_RESET}" if self.use_color else s

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created)
        stamp = f"{ts:%b} {ts.day:2d} {ts:%H:%M:%S}.{int(record.msecs):03d}"

        label = _LEVEL_LABELS.get(record.levelname, record.levelname)
        if self.use_color:
            label = f"{_LEVEL_COLORS.get(record.levelname, '')}{label}{_RESET}"

        parts = [self._faint(stamp), label, self._faint(f"[{record.name}]")]
        src = _with_source(record)
        if src:
            parts.append(self._faint(src))
        parts.append(record.getMessage())
        for key, value in _extra(record).items():
            shown = json.dumps(value) if isinstance(value, str) else str(value)
            parts.append(f"{self._faint(key)}={shown}")

        text = " ".join(parts)
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        src = _with_source(record)
        if src:
            entry["source"] = src
        entry["msg"] = record.getMessage()
        entry["attrs"] = _extra(record)

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }
        return json.dumps(entry, default=str)


def setup_logging(
    level: str = "INFO",
    *,
    json_lines: bool = False,
    use_color: bool | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Install a single handler on the envload logger, replacing earlier ones."""
    out = stream if stream is not None else sys.stderr
    if use_color is None:
        use_color = bool(getattr(out, "isatty", lambda: False)())

    handler = logging.StreamHandler(out)
    handler.setFormatter(JSONFormatter() if json_lines else TextFormatter(use_color=use_color))

    root = logging.getLogger(ROOT_LOGGER)
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper()))
    root.propagate = False
    return root
