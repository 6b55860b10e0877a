from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable

from envload.environ import EnvProvider, default_env
from envload.expand import chain_lookup, expand
from envload.parser import parse

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = ".env"


class EnvFileError(OSError):
    """An env file exists but could not be read."""

    def __init__(self, path: Path, cause: BaseException) -> None:
        super().__init__(f"cannot read env file {path}: {cause}")
        self.path = path
        self.cause = cause


@dataclass(frozen=True)
class Options:
    overwrite: bool = False
    expand: bool = True


class FileStatus(Enum):
    SKIPPED = "skipped"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class FileResult:
    path: Path
    status: FileStatus
    values: dict[str, str] = field(default_factory=dict)
    error: BaseException | None = None


def filenames_or_default(paths: Iterable[str | Path] | None) -> list[str]:
    names = [str(p) for p in paths or []]
    return names or [DEFAULT_FILENAME]


def read_file(path: str | Path) -> FileResult:
    """Read one env file. Missing paths and directories are SKIPPED, never errors."""
    p = Path(path)
    if p.is_dir():
        logger.debug("skipping directory", extra={"extra_data": {"path": str(p)}})
        return FileResult(path=p, status=FileStatus.SKIPPED)
    try:
        with p.open("r", encoding="utf-8", newline="") as handle:
            # Only \n ends a line; split_kv strips the \r of a \r\n ending.
            values = parse(handle.read().split("\n"), source=str(p))
    except (FileNotFoundError, IsADirectoryError):
        logger.debug("skipping missing file", extra={"extra_data": {"path": str(p)}})
        return FileResult(path=p, status=FileStatus.SKIPPED)
    except (OSError, UnicodeDecodeError) as exc:
        return FileResult(path=p, status=FileStatus.FAILED, error=exc)
    return FileResult(path=p, status=FileStatus.LOADED, values=values)


def _merge(paths: list[str]) -> dict[str, str]:
    merged: dict[str, str] = {}
    for name in paths:
        result = read_file(name)
        if result.status is FileStatus.FAILED:
            cause = result.error or OSError(f"cannot read {result.path}")
            raise EnvFileError(result.path, cause) from cause
        if result.status is FileStatus.LOADED:
            logger.debug("read env file", extra={"extra_data": {"path": str(result.path), "keys": len(result.values)}})
            merged.update(result.values)
    return merged


def load(
    paths: Iterable[str | Path] | None = None,
    options: Options | None = None,
    env: EnvProvider | None = None,
) -> dict[str, str]:
    """Merge env files (later files win), optionally expand ${VAR}, then apply to env.

    Expansion runs after every file is merged, looking names up in the merged
    values before falling back to env. With options.overwrite False, keys that
    env already has are left untouched, and variables env refuses (a key with
    "=", a NUL byte) are logged and skipped. Raises EnvFileError before touching
    env when a file exists but cannot be read.
    """
    opts = options or Options()
    target = default_env(env)

    merged = _merge(filenames_or_default(paths))

    if opts.expand:
        lookup = chain_lookup(dict(merged), target)
        merged = {key: expand(value, lookup) for key, value in merged.items()}

    applied = 0
    for key, value in merged.items():
        if not target.accepts(key, value):
            logger.warning("environment rejects variable, not applied", extra={"extra_data": {"key": key}})
            continue
        if opts.overwrite or not target.has(key):
            target.set(key, value)
            applied += 1

    logger.debug(
        "loaded env files",
        extra={"extra_data": {"keys": len(merged), "applied": applied, "overwrite": opts.overwrite}},
    )
    return merged


def load_default(options: Options | None = None, env: EnvProvider | None = None) -> dict[str, str]:
    return load(None, options, env)
