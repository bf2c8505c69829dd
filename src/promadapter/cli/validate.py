"""
CLI command compiling a rule file and summarising the result.

Commands:
    promadapter validate rules.yaml               - Compile and show every rule
    promadapter validate rules.yaml -f json       - Machine-readable summary
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from promadapter.cli.common import load_namers
from promadapter.cli.ux import error, header, print_table, success
from promadapter.core.errors import ConfigurationError, format_error_message, main_with_error_handling
from promadapter.naming.namer import MetricNamer


def _describe(index: int, namer: MetricNamer) -> dict[str, Any]:
    return {
        "rule": index,
        "selector": namer.selector(),
        "filters": [repr(m) for m in namer.series_matchers],
        "name": namer.name_pattern,
        "as": namer.name_as,
        "label_template": namer.label_template.text if namer.label_template else None,
        "query": namer.metrics_query_template.text,
    }


@main_with_error_handling()
def validate_command(rules_file: str | None, output_format: str = "table") -> int:
    """Compile the rules; exit 10 on the first invalid rule."""
    try:
        namers = load_namers(rules_file)
    except ConfigurationError as e:
        if output_format == "json":
            print(json.dumps({"valid": False, "error": format_error_message(e)}, indent=2))
        else:
            error(format_error_message(e))
        return e.exit_code

    rules = [_describe(index, namer) for index, namer in enumerate(namers)]
    if output_format == "json":
        print(json.dumps({"valid": True, "rules": rules}, indent=2))
        return 0

    header(f"Rules: {rules_file or 'built-in defaults'}")
    print_table(
        title="Compiled rules",
        columns=["#", "Selector", "Filters", "Name", "As", "Label template"],
        rows=[
            [
                str(rule["rule"]),
                rule["selector"],
                "\n".join(rule["filters"]) or "-",
                rule["name"],
                rule["as"],
                rule["label_template"] or "-",
            ]
            for rule in rules
        ],
    )
    success(f"{len(rules)} rule(s) compiled")
    return 0


def register_validate_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "validate",
        help="Compile a discovery rule file and report the first error",
    )
    parser.add_argument(
        "rules_file",
        nargs="?",
        help="Rule file (default: PROMADAPTER_CONFIG_FILE or built-in rules)",
    )
    parser.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )


def handle_validate_command(args: argparse.Namespace) -> int:
    return validate_command(
        rules_file=getattr(args, "rules_file", None),
        output_format=getattr(args, "output_format", "table"),
    )
