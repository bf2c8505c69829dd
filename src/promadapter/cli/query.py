"""
CLI command rendering the query that fetches a series for some resources.

Commands:
    promadapter query container_cpu_usage_seconds_total --resource pods --namespace ns1 p1 p2
"""

from __future__ import annotations

import argparse
import json

from promadapter.cli.common import accepting_namers, load_namers
from promadapter.client.models import Series
from promadapter.core.errors import ResolutionError, main_with_error_handling
from promadapter.resources.mapper import default_resource_mapper
from promadapter.resources.models import GroupResource


def render_query(
    series_name: str,
    resource: GroupResource,
    namespace: str,
    names: list[str],
    rules_file: str | None = None,
) -> tuple[int, str]:
    """Render the query with the first rule accepting the series; returns (rule index, query)."""
    mapper = default_resource_mapper()
    resource = mapper.normalize(resource)
    matches = accepting_namers(load_namers(rules_file, mapper), Series(name=series_name))
    if not matches:
        raise ResolutionError(
            f"no rule accepts series {series_name!r}",
            details={"series": series_name},
        )

    index, namer = matches[0]
    return index, namer.query_for_series(series_name, resource, namespace, *names)


@main_with_error_handling()
def query_command(
    series_name: str,
    resource: str,
    names: list[str],
    group: str = "",
    namespace: str = "",
    rules_file: str | None = None,
    output_format: str = "text",
) -> int:
    index, query = render_query(
        series_name,
        GroupResource(group=group, resource=resource),
        namespace,
        names,
        rules_file,
    )
    if output_format == "json":
        print(json.dumps({"rule": index, "series": series_name, "query": query}, indent=2))
    else:
        print(query)
    return 0


def register_query_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "query",
        help="Render the aggregation query for a series and resource names",
    )
    parser.add_argument("series_name", help="Series (metric) name")
    parser.add_argument("names", nargs="+", help="Names of the target resources")
    parser.add_argument("--resource", required=True, help="Resource kind, e.g. pods")
    parser.add_argument("--group", default="", help="API group of the resource")
    parser.add_argument("--namespace", "-n", default="", help="Namespace of the resources")
    parser.add_argument("--rules", dest="rules_file", help="Rule file (default: built-in rules)")
    parser.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )


def handle_query_command(args: argparse.Namespace) -> int:
    return query_command(
        series_name=args.series_name,
        resource=args.resource,
        names=args.names,
        group=getattr(args, "group", ""),
        namespace=getattr(args, "namespace", ""),
        rules_file=getattr(args, "rules_file", None),
        output_format=getattr(args, "output_format", "text"),
    )
