"""
Metrics provider: the compiled rule set plus the metric index built from it.

The serving and discovery layers share one provider.  Both the namer list
and the metric index are immutable values swapped wholesale, so readers
never observe a half-built rule set or index.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Sequence

import structlog

from promadapter.client.base import SeriesClient
from promadapter.client.models import Selector
from promadapter.config.models import MetricsDiscoveryConfig
from promadapter.core.errors import ResolutionError
from promadapter.logging import bind_context
from promadapter.naming.builder import namers_from_config
from promadapter.naming.namer import MetricNamer
from promadapter.resources.mapper import ResourceMapper
from promadapter.resources.models import NAMESPACES, GroupResource

logger = structlog.get_logger()


@dataclass(frozen=True)
class CustomMetricInfo:
    """A metric as exposed by the metrics API: a name scoped to a resource."""

    group_resource: GroupResource
    namespaced: bool
    metric: str

    def __str__(self) -> str:
        scope = "namespaced" if self.namespaced else "root-scoped"
        return f"{self.group_resource}/{self.metric} ({scope})"

    def sort_key(self) -> tuple[str, str, bool]:
        return (self.metric, str(self.group_resource), self.namespaced)

    def to_dict(self) -> dict[str, Any]:
        return {
            "group": self.group_resource.group,
            "resource": self.group_resource.resource,
            "namespaced": self.namespaced,
            "metric": self.metric,
        }


@dataclass(frozen=True)
class SeriesInfo:
    """Where a metric came from: the backend series name and the namer that claimed it."""

    series_name: str
    namer: MetricNamer


class MetricsProvider:
    """Holds the compiled namers and the most recent metric index."""

    def __init__(self, mapper: ResourceMapper, namers: Sequence[MetricNamer]) -> None:
        self._mapper = mapper
        self._lock = threading.Lock()
        self._namers: tuple[MetricNamer, ...] = tuple(namers)
        self._index: dict[CustomMetricInfo, SeriesInfo] = {}

    @classmethod
    def from_config(cls, config: MetricsDiscoveryConfig, mapper: ResourceMapper) -> MetricsProvider:
        return cls(mapper, namers_from_config(config, mapper))

    @property
    def mapper(self) -> ResourceMapper:
        return self._mapper

    @property
    def namers(self) -> tuple[MetricNamer, ...]:
        return self._namers

    def reload(self, config: MetricsDiscoveryConfig) -> None:
        """
        Compile a new rule set and swap it in.

        A configuration error leaves the current namers in place.  The
        metric index is rebuilt by the next ``update_metrics`` call.
        """
        namers = tuple(namers_from_config(config, self._mapper))
        with self._lock:
            self._namers = namers
        logger.info("rules_reloaded", rules=len(namers))

    def update_metrics(self, client: SeriesClient) -> list[CustomMetricInfo]:
        """
        Run one discovery pass and publish the resulting index.

        Earlier namers win when several claim the same metric.  Series
        whose names cannot be converted are skipped; client errors
        propagate and leave the previous index published.
        """
        namers = self._namers
        log = bind_context(rules=len(namers))
        index: dict[CustomMetricInfo, SeriesInfo] = {}

        for namer in namers:
            selector: Selector = namer.selector()
            series_list = namer.filter_series(client.series(selector))
            for series in series_list:
                try:
                    name = namer.metric_name_for_series(series)
                except ResolutionError as e:
                    log.warning("unable_to_name_series", series=series.name, error=e.message)
                    continue

                resources, namespaced = namer.resources_for_series(series)
                for resource in resources:
                    info = CustomMetricInfo(
                        group_resource=resource,
                        namespaced=namespaced and resource != NAMESPACES,
                        metric=name,
                    )
                    if info not in index:
                        index[info] = SeriesInfo(series_name=series.name, namer=namer)

        with self._lock:
            self._index = index
        log.info("metrics_updated", metrics=len(index))
        return list(index)

    def list_all_metrics(self) -> list[CustomMetricInfo]:
        return list(self._index)

    def series_for_metric(self, info: CustomMetricInfo) -> SeriesInfo:
        series_info = self._index.get(info)
        if series_info is None:
            raise ResolutionError(
                f"no series found for metric {info}",
                details={"metric": info.metric, "resource": str(info.group_resource)},
            )
        return series_info

    def query_for_metric(self, info: CustomMetricInfo, namespace: str, *names: str) -> Selector:
        """Render the query fetching ``info`` for the named resources."""
        series_info = self.series_for_metric(info)
        return series_info.namer.query_for_series(
            series_info.series_name, info.group_resource, namespace, *names
        )
