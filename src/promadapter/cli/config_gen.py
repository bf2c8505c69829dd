"""
CLI command printing the built-in rule set.

Commands:
    promadapter config-gen                          - Default rules, 5m rate window
    promadapter config-gen --rate-interval 1m       - Custom rate window
    promadapter config-gen --label-prefix kube_     - Prefixed resource labels
"""

from __future__ import annotations

import argparse

from promadapter.config.defaults import default_config
from promadapter.core.errors import main_with_error_handling


@main_with_error_handling()
def config_gen_command(rate_interval: str = "5m", label_prefix: str = "") -> int:
    """Print the default rule set as YAML."""
    config = default_config(rate_interval, label_prefix)
    print(config.to_yaml(), end="")
    return 0


def register_config_gen_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "config-gen",
        help="Print the default discovery rules as YAML",
    )
    parser.add_argument(
        "--rate-interval",
        default="5m",
        help="Window used by rate() in generated queries (default: 5m)",
    )
    parser.add_argument(
        "--label-prefix",
        default="",
        help="Prefix of resource labels on non-cAdvisor series",
    )


def handle_config_gen_command(args: argparse.Namespace) -> int:
    return config_gen_command(
        rate_interval=args.rate_interval,
        label_prefix=args.label_prefix,
    )
