from __future__ import annotations

import argparse
import logging
import sys
from types import ModuleType

from relaykit.http.cli import call

_SUBCOMMANDS: list[ModuleType] = [call]


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="relaykit-http",
        description="Run HTTP requests through a bounded request pipeline",
    )
    parser.add_argument("-v", "--verbose", action="store_true", default=False, help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for subcommand in _SUBCOMMANDS:
        subcommand.register_parser(subparsers)

    return parser


def _configure_logging(verbose: bool = False) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logging.getLogger("relaykit.http").addHandler(handler)
    logging.getLogger("relaykit.http").setLevel(logging.DEBUG if verbose else logging.WARNING)


def main(args: list[str] | None = None) -> int:
    parser = create_parser()
    parsed = parser.parse_args(args)
    _configure_logging(verbose=parsed.verbose)

    for subcommand in _SUBCOMMANDS:
        if parsed.command == subcommand.COMMAND:
            return subcommand.run(parsed)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
