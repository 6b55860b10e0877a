from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from envload.loader import DEFAULT_FILENAME, Options

DEFAULT_PROFILE = Path("envload.yaml")

_ALLOWED_KEYS = ("files", "overwrite", "expand", "log_level")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ProfileError(ValueError):
    pass


@dataclass(frozen=True)
class Profile:
    """Which env files to load, and how."""

    files: list[str] = field(default_factory=lambda: [DEFAULT_FILENAME])
    overwrite: bool = False
    expand: bool = True
    log_level: str = "INFO"

    def options(self) -> Options:
        return Options(overwrite=self.overwrite, expand=self.expand)

    @classmethod
    def from_dict(cls, payload: dict[str, Any], *, base_dir: Path | None = None) -> "Profile":
        unknown = set(payload) - set(_ALLOWED_KEYS)
        if unknown:
            raise ProfileError(f"Unknown keys in profile: {sorted(unknown)}")

        raw_files = payload.get("files", [DEFAULT_FILENAME])
        if isinstance(raw_files, str):
            raw_files = [raw_files]
        if not isinstance(raw_files, list) or not all(isinstance(f, str) for f in raw_files):
            raise ProfileError("profile.files must be a string or a list of strings")
        files = [_resolve(f, base_dir) for f in raw_files]

        flags = {}
        for name in ("overwrite", "expand"):
            value = payload.get(name, getattr(cls, name))
            if not isinstance(value, bool):
                raise ProfileError(f"profile.{name} must be true or false, got {value!r}")
            flags[name] = value

        log_level = str(payload.get("log_level", "INFO")).upper()
        if log_level not in _LOG_LEVELS:
            raise ProfileError(f"profile.log_level must be one of {', '.join(_LOG_LEVELS)}")

        return cls(files=files, log_level=log_level, **flags)


def _resolve(name: str, base_dir: Path | None) -> str:
    p = Path(name)
    if base_dir is None or p.is_absolute():
        return name
    return str(base_dir / p)


def load_profile(path: Path = DEFAULT_PROFILE) -> Profile:
    """Read a YAML profile; a missing file yields the default profile."""
    if not path.exists():
        return Profile()
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ProfileError(f"invalid YAML in {path}: {exc}") from exc
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ProfileError(f"{path} must contain a mapping at the top level")
    return Profile.from_dict(payload, base_dir=path.parent)
