"""
Built-in rule set.

Reproduces the behaviour from before rules were configurable:

- cAdvisor series (``container_*``) carry ``namespace`` and ``pod_name``
  labels and are exposed on pods and namespaces;
- every other series carries ``<prefix><resource>`` labels;
- series ending in ``_total`` are counters and exposed as rates, with
  ``_seconds_total`` counters exposed without the suffix.
"""

from __future__ import annotations

import re
from datetime import timedelta

from promadapter.client.selectors import label_neq, match_series, name_matches, name_not_matches
from promadapter.config.models import (
    DiscoveryRule,
    MetricsDiscoveryConfig,
    NameMapping,
    RegexFilter,
    ResourceMapping,
)
from promadapter.core.errors import ConfigurationError
from promadapter.resources.models import GroupResource

_DURATION_UNITS = [
    ("y", 1000 * 60 * 60 * 24 * 365, True),
    ("w", 1000 * 60 * 60 * 24 * 7, True),
    ("d", 1000 * 60 * 60 * 24, False),
    ("h", 1000 * 60 * 60, False),
    ("m", 1000 * 60, False),
    ("s", 1000, False),
    ("ms", 1, False),
]
_UNIT_MS = {unit: mult for unit, mult, _ in _DURATION_UNITS}
_DURATION_RE = re.compile(r"^(?:(\d+)y)?(?:(\d+)w)?(?:(\d+)d)?(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?(?:(\d+)ms)?$")


def format_duration(value: timedelta) -> str:
    """Render a duration in Prometheus notation (``90s`` -> ``1m30s``)."""
    ms = int(value / timedelta(milliseconds=1))
    if ms == 0:
        return "0s"
    out = ""
    for unit, mult, exact in _DURATION_UNITS:
        if exact and ms % mult != 0:
            continue
        count = ms // mult
        if count > 0:
            out += f"{count}{unit}"
            ms -= count * mult
    return out


def parse_duration(text: str) -> timedelta:
    """Parse a Prometheus duration such as ``5m`` or ``1h30m``."""
    match = _DURATION_RE.match(text.strip())
    if not text.strip() or match is None or not any(match.groups()):
        raise ConfigurationError(f"invalid duration {text!r}", details={"duration": text})
    ms = 0
    for (unit, _, _), count in zip(_DURATION_UNITS, match.groups()):
        if count:
            ms += int(count) * _UNIT_MS[unit]
    return timedelta(milliseconds=ms)


def default_config(rate_interval: timedelta | str = timedelta(minutes=5), label_prefix: str = "") -> MetricsDiscoveryConfig:
    """Return the built-in rule set for the given rate window and label prefix."""
    if isinstance(rate_interval, str):
        rate_interval = parse_duration(rate_interval)
    window = format_duration(rate_interval)

    container_query = match_series(
        "",
        name_matches("^container_.*"),
        label_neq("container_name", "POD"),
        label_neq("namespace", ""),
        label_neq("pod_name", ""),
    )
    container_resources = {
        "namespace": GroupResource(resource="namespace"),
        "pod_name": GroupResource(resource="pod"),
    }
    normal_query = match_series(
        "",
        label_neq(f"{label_prefix}namespace", ""),
        name_not_matches("^container_.*"),
    )
    normal_template = f"{label_prefix}<<.Resource>>"

    return MetricsDiscoveryConfig(
        rules=[
            # container seconds rate metrics
            DiscoveryRule(
                series_query=container_query,
                resources=ResourceMapping(overrides=dict(container_resources)),
                name=NameMapping(matches="^container_(.*)_seconds_total$"),
                metrics_query=f'sum(rate(<<.Series>>{{<<.LabelMatchers>>,container_name!="POD"}}[{window}])) by (<<.GroupBy>>)',
            ),
            # container rate metrics
            DiscoveryRule(
                series_query=container_query,
                series_filters=[RegexFilter(is_not="^container_.*_seconds_total$")],
                resources=ResourceMapping(overrides=dict(container_resources)),
                name=NameMapping(matches="^container_(.*)_total$"),
                metrics_query=f'sum(rate(<<.Series>>{{<<.LabelMatchers>>,container_name!="POD"}}[{window}])) by (<<.GroupBy>>)',
            ),
            # container non-cumulative metrics
            DiscoveryRule(
                series_query=container_query,
                series_filters=[RegexFilter(is_not="^container_.*_total$")],
                resources=ResourceMapping(overrides=dict(container_resources)),
                name=NameMapping(matches="^container_(.*)$"),
                metrics_query='sum(<<.Series>>{<<.LabelMatchers>>,container_name!="POD"}) by (<<.GroupBy>>)',
            ),
            # normal non-cumulative metrics
            DiscoveryRule(
                series_query=normal_query,
                series_filters=[RegexFilter(is_not=".*_total$")],
                resources=ResourceMapping(template=normal_template),
                metrics_query="sum(<<.Series>>{<<.LabelMatchers>>}) by (<<.GroupBy>>)",
            ),
            # normal rate metrics
            DiscoveryRule(
                series_query=normal_query,
                series_filters=[RegexFilter(is_not=".*_seconds_total")],
                resources=ResourceMapping(template=normal_template),
                name=NameMapping(matches="^(.*)_total$"),
                metrics_query=f"sum(rate(<<.Series>>{{<<.LabelMatchers>>}}[{window}])) by (<<.GroupBy>>)",
            ),
            # seconds rate metrics
            DiscoveryRule(
                series_query=normal_query,
                resources=ResourceMapping(template=normal_template),
                name=NameMapping(matches="^(.*)_seconds_total$"),
                metrics_query=f"sum(rate(<<.Series>>{{<<.LabelMatchers>>}}[{window}])) by (<<.GroupBy>>)",
            ),
        ]
    )
