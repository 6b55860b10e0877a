from __future__ import annotations

import json
from typing import Mapping

import yaml

FORMATS = ("dotenv", "json", "yaml")

_NEEDS_QUOTES = set("#\"'\\\n\r\t")
_QUOTE_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}


def _dotenv_value(value: str) -> str:
    if value == value.strip() and not (_NEEDS_QUOTES & set(value)):
        return value
    return '"' + "".join(_QUOTE_ESCAPES.get(ch, ch) for ch in value) + '"'


def render_dotenv(values: Mapping[str, str]) -> str:
    """Render KEY=VALUE lines that parse back to the same mapping."""
    return "".join(f"{key}={_dotenv_value(values[key])}\n" for key in sorted(values))


def render_json(values: Mapping[str, str]) -> str:
    return json.dumps(dict(values), sort_keys=True, indent=2) + "\n"


def render_yaml(values: Mapping[str, str]) -> str:
    return yaml.safe_dump(dict(values), default_flow_style=False, sort_keys=True, allow_unicode=True)


def render(values: Mapping[str, str], fmt: str) -> str:
    if fmt == "dotenv":
        return render_dotenv(values)
    if fmt == "json":
        return render_json(values)
    if fmt == "yaml":
        return render_yaml(values)
    raise ValueError(f"unsupported format {fmt!r}; expected one of {', '.join(FORMATS)}")
