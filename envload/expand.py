from __future__ import annotations

from typing import Callable, Mapping

from envload.environ import EnvProvider

Lookup = Callable[[str], tuple[str, bool]]


def expand(text: str, lookup: Lookup) -> str:
    """Replace each ${name} in text with lookup(name), or "" when not found.

    Substituted values are not scanned again. An unterminated "${" and
    everything after it is kept as written; bare $NAME is left alone.
    """
    out: list[str] = []
    pos = 0
    while True:
        start = text.find("${", pos)
        if start < 0:
            break
        close = text.find("}", start + 2)
        if close < 0:
            break
        out.append(text[pos:start])
        value, found = lookup(text[start + 2 : close])
        if found:
            out.append(value)
        pos = close + 1
    out.append(text[pos:])
    return "".join(out)


def chain_lookup(values: Mapping[str, str], env: EnvProvider) -> Lookup:
    """Look names up in values first, then in env."""

    def lookup(name: str) -> tuple[str, bool]:
        if name in values:
            return (values[name], True)
        got = env.get(name)
        if got is None:
            return ("", False)
        return (got, True)

    return lookup
