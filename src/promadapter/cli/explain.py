"""
CLI command showing how the rules classify a single series.

Commands:
    promadapter explain container_cpu_usage_seconds_total -l pod_name=p1 -l namespace=ns1
    promadapter explain http_requests_total -l pod=p1 --rules rules.yaml -f json
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from promadapter.cli.common import accepting_namers, load_namers, parse_labels
from promadapter.cli.ux import error, header, print_table, warning
from promadapter.client.models import Series
from promadapter.core.errors import ExitCode, ResolutionError, main_with_error_handling


def explain_series(series: Series, rules_file: str | None = None) -> list[dict[str, Any]]:
    """Classify the series with every rule that accepts it."""
    results = []
    for index, namer in accepting_namers(load_namers(rules_file), series):
        entry: dict[str, Any] = {"rule": index}
        try:
            entry["metric"] = namer.metric_name_for_series(series)
        except ResolutionError as e:
            entry["error"] = e.message
            results.append(entry)
            continue

        resources, namespaced = namer.resources_for_series(series)
        entry["resources"] = [str(resource) for resource in resources]
        entry["namespaced"] = namespaced
        results.append(entry)
    return results


@main_with_error_handling()
def explain_command(
    series_name: str,
    labels: dict[str, str],
    rules_file: str | None = None,
    output_format: str = "table",
) -> int:
    series = Series(name=series_name, labels=labels)
    results = explain_series(series, rules_file)

    if output_format == "json":
        print(json.dumps({"series": series.to_dict(), "matches": results}, indent=2))
    elif results:
        header(f"Series: {series_name}")
        print_table(
            title="Matching rules (first rule wins)",
            columns=["#", "Metric", "Resources", "Namespaced"],
            rows=[
                [
                    str(r["rule"]),
                    r.get("metric", r.get("error", "")),
                    ", ".join(r.get("resources", [])) or "-",
                    "yes" if r.get("namespaced") else "no",
                ]
                for r in results
            ],
        )

    if not results:
        if output_format != "json":
            warning(f"no rule accepts series {series_name!r}")
        return ExitCode.RESOLUTION_ERROR
    return 0


def register_explain_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "explain",
        help="Show which rules claim a series and what they make of it",
    )
    parser.add_argument("series_name", help="Series (metric) name")
    parser.add_argument(
        "--label",
        "-l",
        dest="labels",
        action="append",
        metavar="KEY=VALUE",
        help="Series label, repeatable",
    )
    parser.add_argument("--rules", dest="rules_file", help="Rule file (default: built-in rules)")
    parser.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )


def handle_explain_command(args: argparse.Namespace) -> int:
    try:
        labels = parse_labels(getattr(args, "labels", None))
    except ValueError as e:
        error(str(e))
        return 2

    return explain_command(
        series_name=args.series_name,
        labels=labels,
        rules_file=getattr(args, "rules_file", None),
        output_format=getattr(args, "output_format", "table"),
    )
