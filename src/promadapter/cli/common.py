"""Helpers shared by the rule-oriented CLI commands."""

from __future__ import annotations

from promadapter.client.models import Series
from promadapter.config.loader import load_config
from promadapter.naming.builder import namers_from_config
from promadapter.naming.namer import MetricNamer
from promadapter.resources.mapper import ResourceMapper, default_resource_mapper


def load_namers(
    rules_file: str | None = None,
    mapper: ResourceMapper | None = None,
) -> list[MetricNamer]:
    """Compile the rule file (or the default rules) into namers."""
    mapper = mapper or default_resource_mapper()
    return namers_from_config(load_config(rules_file), mapper)


def parse_labels(pairs: list[str] | None) -> dict[str, str]:
    """Turn ``["pod=p1", "namespace=ns1"]`` into a label dict."""
    labels: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"invalid label {pair!r}, expected key=value")
        labels[key] = value
    return labels


def accepting_namers(namers: list[MetricNamer], series: Series) -> list[tuple[int, MetricNamer]]:
    """Namers (with their rule index) whose filters accept the series."""
    return [(index, namer) for index, namer in enumerate(namers) if namer.filter_series([series])]
