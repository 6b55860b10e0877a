from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from envload.getters import (
    get_bool,
    get_duration,
    get_int,
    get_string,
    get_strings,
    must_string,
    parse_bool,
    parse_duration,
    parse_int,
)
from envload.loader import EnvFileError, load
from envload.log import setup_logging
from envload.profile import DEFAULT_PROFILE, ProfileError, load_profile
from envload.render import FORMATS, render
from envload.util import write_text_atomic

logger = logging.getLogger("envload.cli")

_TYPES = ("str", "int", "bool", "duration", "list")


def _add_load_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "-f",
        "--file",
        dest="files",
        action="append",
        type=Path,
        default=[],
        help="Env file to load (repeatable, later files win). Defaults to the profile's files.",
    )
    p.add_argument("--overwrite", action="store_true", default=None, help="Replace variables already in the environment.")
    p.add_argument("--no-expand", dest="expand", action="store_false", default=None, help="Do not expand ${VAR} references.")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="envload", description="Load .env files into the environment and inspect the result.")
    p.add_argument("--profile", type=Path, default=DEFAULT_PROFILE, help="YAML profile naming env files and load options.")
    p.add_argument(
        "--log-level",
        type=str.upper,
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        default=None,
        help="Log level (defaults to the profile's log_level).",
    )
    p.add_argument("--log-json", action="store_true", help="Emit logs as JSON lines.")
    sub = p.add_subparsers(dest="cmd", required=True)

    show = sub.add_parser("show", help="Print the merged key/value mapping.")
    _add_load_args(show)
    show.add_argument("--format", choices=FORMATS, default="dotenv", help="Output format.")
    show.add_argument("--out", type=Path, default=None, help="Write to this file instead of stdout.")

    get = sub.add_parser("get", help="Print one variable after loading, parsed as a type.")
    get.add_argument("key")
    _add_load_args(get)
    get.add_argument("--type", choices=_TYPES, default="str", help="How to parse the value.")
    get.add_argument("--default", default=None, help="Value used when the variable is unset, empty or unparsable.")
    get.add_argument("--sep", default=",", help="Separator for --type list.")

    require = sub.add_parser("require", help="Exit non-zero unless every KEY is set after loading.")
    require.add_argument("keys", nargs="+", metavar="KEY")
    _add_load_args(require)

    return p


def _typed_value(p: argparse.ArgumentParser, args: argparse.Namespace) -> str:
    kind = args.type
    default = args.default

    if kind == "str":
        return get_string(args.key, default or "")
    if kind == "list":
        fallback = [default] if default else []
        return "\n".join(get_strings(args.key, args.sep, fallback) or [])
    if kind == "int":
        n = parse_int(default or "0")
        if n is None:
            p.error(f"--default {default!r} is not an integer")
        return str(get_int(args.key, n))
    if kind == "bool":
        b = parse_bool(default or "false")
        if b is None:
            p.error(f"--default {default!r} is not a boolean")
        return "true" if get_bool(args.key, b) else "false"

    d = parse_duration(default or "0")
    if d is None:
        p.error(f"--default {default!r} is not a duration")
    return str(get_duration(args.key, d))


def main(argv: list[str] | None = None) -> int:
    p = _build_parser()
    args = p.parse_args(argv)

    try:
        profile = load_profile(args.profile)
    except ProfileError as exc:
        setup_logging(args.log_level or "INFO", json_lines=args.log_json)
        logger.error("invalid profile: %s", exc)
        return 1
    setup_logging(args.log_level or profile.log_level, json_lines=args.log_json)

    files = [str(f) for f in args.files] or profile.files
    options = profile.options()
    if args.overwrite is not None:
        options = replace(options, overwrite=args.overwrite)
    if args.expand is not None:
        options = replace(options, expand=args.expand)
    try:
        values = load(files, options)
    except EnvFileError as exc:
        logger.error("%s", exc)
        return 1

    if args.cmd == "show":
        text = render(values, args.format)
        if args.out:
            write_text_atomic(args.out, text)
            logger.info("wrote %d keys", len(values), extra={"extra_data": {"path": str(args.out)}})
        else:
            print(text, end="")
        return 0

    if args.cmd == "get":
        print(_typed_value(p, args))
        return 0

    if args.cmd == "require":
        for key in args.keys:
            must_string(key)
        return 0

    raise RuntimeError(f"unhandled cmd={args.cmd!r}")
