from __future__ import annotations

import logging
import math
import re
from datetime import timedelta

from envload.environ import EnvProvider, default_env

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"[+-]?[0-9]+")
_BOOL_TOKENS = {
    "1": True,
    "t": True,
    "T": True,
    "TRUE": True,
    "true": True,
    "True": True,
    "0": False,
    "f": False,
    "F": False,
    "FALSE": False,
    "false": False,
    "False": False,
}
_DURATION_PART_RE = re.compile(r"([0-9]+(?:\.[0-9]*)?|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h)")
# Microseconds per unit.
_DURATION_UNITS = {
    "ns": 1e-3,
    "us": 1.0,
    "µs": 1.0,
    "μs": 1.0,
    "ms": 1e3,
    "s": 1e6,
    "m": 60e6,
    "h": 3600e6,
}


def _raw(key: str, env: EnvProvider | None) -> str:
    return default_env(env).get(key) or ""


def _fallback(key: str, raw: str, kind: str) -> None:
    logger.debug("unparsable value, using default", extra={"extra_data": {"key": key, "value": raw, "type": kind}})


def parse_int(s: str) -> int | None:
    if not _INT_RE.fullmatch(s):
        return None
    return int(s)


def parse_bool(s: str) -> bool | None:
    return _BOOL_TOKENS.get(s)


def parse_duration(s: str) -> timedelta | None:
    """Parse durations such as "250ms", "1h30m" or "-1.5s"."""
    sign = 1
    if s and s[0] in "+-":
        sign = -1 if s[0] == "-" else 1
        s = s[1:]
    if s == "0":
        return timedelta(0)
    if not s:
        return None

    micros = 0.0
    pos = 0
    while pos < len(s):
        m = _DURATION_PART_RE.match(s, pos)
        if not m:
            return None
        micros += float(m.group(1)) * _DURATION_UNITS[m.group(2)]
        pos = m.end()
    if math.isinf(micros):
        return None
    try:
        return timedelta(microseconds=sign * micros)
    except OverflowError:
        return None


def get_string(key: str, default: str, *, env: EnvProvider | None = None) -> str:
    return _raw(key, env) or default


def get_int(key: str, default: int, *, env: EnvProvider | None = None) -> int:
    raw = _raw(key, env)
    if not raw:
        return default
    value = parse_int(raw)
    if value is None:
        _fallback(key, raw, "int")
        return default
    return value


def get_bool(key: str, default: bool, *, env: EnvProvider | None = None) -> bool:
    raw = _raw(key, env)
    if not raw:
        return default
    value = parse_bool(raw)
    if value is None:
        _fallback(key, raw, "bool")
        return default
    return value


def get_duration(key: str, default: timedelta, *, env: EnvProvider | None = None) -> timedelta:
    raw = _raw(key, env)
    if not raw:
        return default
    value = parse_duration(raw)
    if value is None:
        _fallback(key, raw, "duration")
        return default
    return value


def get_strings(
    key: str,
    sep: str,
    default: list[str] | None,
    *,
    env: EnvProvider | None = None,
) -> list[str] | None:
    """Split a variable on sep, trimming entries and dropping empty ones.

    An empty sep splits the value into single characters.
    """
    raw = _raw(key, env)
    if not raw:
        return default
    parts = raw.split(sep) if sep else list(raw)
    return [part.strip() for part in parts if part.strip()]


def must_string(key: str, *, env: EnvProvider | None = None) -> str:
    """Return a required variable, or stop the process when it is not set."""
    value = default_env(env).get(key)
    if value is None:
        logger.critical("required environment variable is not set", extra={"extra_data": {"key": key}})
        raise SystemExit(f"required environment variable {key} is not set")
    return value
