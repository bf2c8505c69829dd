from __future__ import annotations

import argparse
import sys
from typing import Sequence

from promadapter import __version__
from promadapter.cli.config_gen import handle_config_gen_command, register_config_gen_parser
from promadapter.cli.explain import handle_explain_command, register_explain_parser
from promadapter.cli.query import handle_query_command, register_query_parser
from promadapter.cli.validate import handle_validate_command, register_validate_parser
from promadapter.config.settings import get_settings
from promadapter.logging import configure_logging

HANDLERS = {
    "config-gen": handle_config_gen_command,
    "validate": handle_validate_command,
    "explain": handle_explain_command,
    "query": handle_query_command,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="promadapter",
        description="Inspect and test Prometheus series discovery rules",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        help="Log level (default: PROMADAPTER_LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command")

    register_config_gen_parser(subparsers)
    register_validate_parser(subparsers)
    register_explain_parser(subparsers)
    register_query_parser(subparsers)
    return parser


def run(argv: Sequence[str] | None = None) -> int:
    """Parse arguments and run the selected command; returns the exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    handler = HANDLERS.get(args.command)
    if handler is None:
        parser.print_help()
        return 0

    settings = get_settings()
    configure_logging(args.log_level or settings.log_level, json=settings.log_json)
    return handler(args)


def main(argv: Sequence[str] | None = None) -> None:
    sys.exit(run(argv))


if __name__ == "__main__":
    main()
