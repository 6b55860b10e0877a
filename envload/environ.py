from __future__ import annotations

import os
from typing import MutableMapping, Protocol


class EnvProvider(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def has(self, key: str) -> bool: ...

    def accepts(self, key: str, value: str) -> bool: ...


class OsEnvironment:
    """The real process environment."""

    def __init__(self, environ: MutableMapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ

    def get(self, key: str) -> str | None:
        return self._environ.get(key)

    def set(self, key: str, value: str) -> None:
        self._environ[key] = value

    def has(self, key: str) -> bool:
        return key in self._environ

    def accepts(self, key: str, value: str) -> bool:
        # putenv refuses these; os.environ raises ValueError for them.
        return bool(key) and "=" not in key and "\0" not in key and "\0" not in value


class MemoryEnvironment:
    """An isolated environment, mostly useful in tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def has(self, key: str) -> bool:
        return key in self.values

    def accepts(self, key: str, value: str) -> bool:
        return True


def default_env(env: EnvProvider | None) -> EnvProvider:
    return OsEnvironment() if env is None else env
