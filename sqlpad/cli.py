"""Print completions for a SQL fragment against a configured schema profile."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import load_config
from .errors import SqlpadError
from .session import SessionManager


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="sqlpad", description=__doc__)
    parser.add_argument("sql", help="SQL text to complete")
    parser.add_argument("--profile", help="Schema profile name (defaults to the active profile)")
    parser.add_argument("--dialect", help="SQL dialect used for parsing")
    parser.add_argument("--cursor", type=int, help="Cursor offset (defaults to the end of the text)")
    parser.add_argument("--config", type=Path, help="Path to config.toml")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = load_config(args.config)
    if args.dialect:
        config = config.model_copy(update={"dialect": args.dialect})
    if args.profile:
        config = config.with_active_profile(args.profile)
    try:
        session = SessionManager(config)
    except SqlpadError as exc:
        print(f"sqlpad: {exc}", file=sys.stderr)
        return 2

    result = session.complete(args.sql, args.cursor)
    if result is None:
        return 1
    for option in result.options:
        print(f"{option.label}\t{option.type.value}\t{option.detail or ''}")
    return 0


__all__ = ["main", "parse_args"]
