from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable

logger = logging.getLogger(__name__)

_EXPORT = "export"
_CONTROL_ESCAPES = {"n": "\n", "r": "\r", "t": "\t"}
_DOUBLE_QUOTE_ESCAPES = {**_CONTROL_ESCAPES, '"': '"', "\\": "\\"}


class _State(Enum):
    DOUBLE = "double"
    SINGLE = "single"


def _strip_export(line: str) -> str:
    n = len(_EXPORT)
    if line.startswith(_EXPORT) and len(line) > n and line[n].isspace():
        return line[n:].lstrip()
    return line


def _find_separator(line: str) -> int:
    """Index of the first '=' not preceded by an odd run of backslashes, or -1."""
    backslashes = 0
    for i, ch in enumerate(line):
        if ch == "\\":
            backslashes += 1
            continue
        if ch == "=" and backslashes % 2 == 0:
            return i
        backslashes = 0
    return -1


def _unescape(text: str, table: dict[str, str]) -> str:
    # Backslash pairs missing from the table are kept as written.
    out: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\" and i + 1 < n:
            nxt = text[i + 1]
            out.append(table.get(nxt, ch + nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _scan_unquoted(raw: str) -> str:
    end = len(raw)
    for i, ch in enumerate(raw):
        if ch == "#" and (i == 0 or raw[i - 1].isspace()):
            end = i
            break
    return _unescape(raw[:end].rstrip(), _CONTROL_ESCAPES)


def _scan_value(raw: str) -> str:
    """Turn the left-trimmed text after '=' into the final value, in one pass."""
    if raw.startswith('"'):
        state = _State.DOUBLE
    elif raw.startswith("'"):
        state = _State.SINGLE
    else:
        return _scan_unquoted(raw)

    i = 1
    while i < len(raw):
        ch = raw[i]
        if state is _State.DOUBLE and ch == "\\":
            i += 2
            continue
        if state is _State.DOUBLE and ch == '"':
            return _unescape(raw[1:i], _DOUBLE_QUOTE_ESCAPES)
        if state is _State.SINGLE and ch == "'":
            return raw[1:i]
        i += 1

    # Unterminated quote: the whole value is read as unquoted text.
    return _scan_unquoted(raw)


def split_kv(line: str) -> tuple[str, str, bool]:
    """Split one env-file line into (key, value, ok).

    ok is False for blank lines, comments and lines without an unescaped '='
    or with an empty key.
    """
    line = line.strip()
    if not line or line.startswith("#"):
        return ("", "", False)
    line = _strip_export(line)

    sep = _find_separator(line)
    if sep < 0:
        return ("", "", False)
    key = line[:sep].strip()
    if not key:
        return ("", "", False)

    return (key, _scan_value(line[sep + 1 :].lstrip()), True)


def parse(stream: Iterable[str], *, source: str = "<stream>") -> dict[str, str]:
    """Parse every line of an open text stream; the last assignment of a key wins."""
    values: dict[str, str] = {}
    for lineno, raw in enumerate(stream, start=1):
        key, value, ok = split_kv(raw)
        if not ok:
            text = raw.strip()
            if text and not text.startswith("#"):
                logger.debug("skipping malformed line", extra={"extra_data": {"source": source, "line": lineno}})
            continue
        values[key] = value
    return values
