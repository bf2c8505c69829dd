"""
Metric namers convert Prometheus series names and label names to metrics
API resources, and vice-versa.

Namers are safe to access concurrently.  Returned group-resources are
normalized through the resource mapper, and group-resources passed in as
arguments must themselves be normalized.
"""

from __future__ import annotations

import re
from typing import Mapping, Sequence

import structlog

from promadapter.client.models import Selector, Series
from promadapter.client.selectors import label_eq, label_matches
from promadapter.core.errors import ResolutionError, ResourceMappingError
from promadapter.naming.extractor import LabelGroupResExtractor
from promadapter.naming.matchers import ReMatcher, expand
from promadapter.naming.rwlock import ReadWriteLock
from promadapter.naming.templates import Template
from promadapter.resources.mapper import ResourceMapper
from promadapter.resources.models import NAMESPACES, GroupResource, sanitize_group_name

logger = structlog.get_logger()


class MetricNamer:
    """The compiled, runtime form of one discovery rule."""

    def __init__(
        self,
        *,
        series_query: Selector,
        metrics_query_template: Template,
        mapper: ResourceMapper,
        name_matches: re.Pattern[str],
        name_as: str,
        series_matchers: Sequence[ReMatcher] = (),
        label_template: Template | None = None,
        label_res_extractor: LabelGroupResExtractor | None = None,
        overrides: Mapping[str, GroupResource] | None = None,
    ) -> None:
        self._series_query = series_query
        self._metrics_query_template = metrics_query_template
        self._mapper = mapper
        self._name_matches = name_matches
        self._name_as = name_as
        self._series_matchers = tuple(series_matchers)
        self._label_template = label_template
        self._label_res_extractor = label_res_extractor

        self._label_resource_lock = ReadWriteLock()
        self._label_to_resource: dict[str, GroupResource] = {}
        self._resource_to_label: dict[GroupResource, str] = {}
        for label, resource in (overrides or {}).items():
            self._label_to_resource[label] = resource
            self._resource_to_label[resource] = label

    @property
    def name_pattern(self) -> str:
        return self._name_matches.pattern

    @property
    def name_as(self) -> str:
        return self._name_as

    @property
    def series_matchers(self) -> tuple[ReMatcher, ...]:
        return self._series_matchers

    @property
    def label_template(self) -> Template | None:
        return self._label_template

    @property
    def metrics_query_template(self) -> Template:
        return self._metrics_query_template

    def selector(self) -> Selector:
        """The series selector matching every series this namer can handle."""
        return self._series_query

    def filter_series(self, initial_series: Sequence[Series]) -> list[Series]:
        """
        Keep the series whose name passes every filter, in their original order.

        The series are assumed to already match the selector.
        """
        if not self._series_matchers:
            return list(initial_series)

        return [
            series
            for series in initial_series
            if all(matcher.matches(series.name) for matcher in self._series_matchers)
        ]

    def resources_for_series(self, series: Series) -> tuple[list[GroupResource], bool]:
        """
        Return the group-resources associated with the series, and whether
        one of them is the namespace resource.

        Newly extracted labels are staged locally and merged into the cache
        once the scan is done, so the write lock is rarely needed after the
        first discovery pass.  Two callers may resolve the same label at the
        same time; both compute the same value.
        """
        labels = list(series.labels)
        with self._label_resource_lock.read_locked():
            known = {lbl: self._label_to_resource[lbl] for lbl in labels if lbl in self._label_to_resource}

        resources: list[GroupResource] = []
        updates: dict[str, GroupResource] = {}
        namespaced = False

        for lbl in labels:
            if lbl in known:
                group_res = known[lbl]
            elif lbl in updates:
                group_res = updates[lbl]
            elif self._label_res_extractor is not None:
                group_res, found = self._label_res_extractor.group_resource_for_label(lbl)
                if not found:
                    continue
                try:
                    group_res = self._mapper.normalize(group_res)
                except ResourceMappingError as e:
                    logger.warning(
                        "unable_to_normalize_label",
                        label=lbl,
                        group_resource=str(group_res),
                        error=e.message,
                    )
                    continue
                updates[lbl] = group_res
            else:
                continue

            resources.append(group_res)
            if group_res == NAMESPACES:
                namespaced = True

        if updates:
            with self._label_resource_lock.write_locked():
                for lbl, group_res in updates.items():
                    self._label_to_resource.setdefault(lbl, group_res)

        return resources, namespaced

    def label_for_resource(self, resource: GroupResource) -> str:
        """Return the series label carrying the given resource's name."""
        with self._label_resource_lock.read_locked():
            lbl = self._resource_to_label.get(resource)
        if lbl is not None:
            return lbl

        try:
            return self._make_label_for_resource(resource)
        except ResolutionError as e:
            raise ResolutionError(
                f"unable to convert resource {resource} into label: {e.message}",
                details={"resource": str(resource)},
            ) from e

    def _make_label_for_resource(self, resource: GroupResource) -> str:
        # must not be called with the lock held
        if self._label_template is None:
            raise ResolutionError("no generic resource label form specified for this metric")

        try:
            singular = self._mapper.singularize(resource.resource)
        except ResourceMappingError as e:
            raise ResolutionError(f"unable to singularize resource {resource}: {e.message}") from e

        lbl = self._label_template.render(
            {"Group": sanitize_group_name(resource.group), "Resource": singular}
        )
        if not lbl:
            raise ResolutionError("empty label produced by label template")

        with self._label_resource_lock.write_locked():
            self._resource_to_label[resource] = lbl
            # an override for the same label keeps its resource
            self._label_to_resource.setdefault(lbl, resource)
        return lbl

    def metric_name_for_series(self, series: Series) -> str:
        """Return the name of the series as presented in the metrics API."""
        match = self._name_matches.search(series.name)
        if match is None:
            raise ResolutionError(
                f"series name {series.name!r} did not match expected pattern {self._name_matches.pattern!r}",
                details={"series": series.name},
            )
        return expand(match, self._name_as)

    def query_for_series(
        self,
        series: str,
        resource: GroupResource,
        namespace: str,
        *names: str,
    ) -> Selector:
        """
        Render the aggregation query for a series (not an API metric name),
        restricted to the given namespace (if any) and resource names.
        """
        if not names:
            raise ResolutionError(
                f"no {resource} names given for series {series!r}",
                details={"series": series},
            )

        exprs = []
        values_by_name: dict[str, list[str]] = {}
        if namespace:
            namespace_lbl = self.label_for_resource(NAMESPACES)
            exprs.append(label_eq(namespace_lbl, namespace))
            values_by_name[namespace_lbl] = [namespace]

        resource_lbl = self.label_for_resource(resource)
        if len(names) > 1:
            exprs.append(label_matches(resource_lbl, "|".join(names)))
        else:
            exprs.append(label_eq(resource_lbl, names[0]))
        values_by_name[resource_lbl] = list(names)

        query = self._metrics_query_template.render(
            {
                "Series": series,
                "LabelMatchers": ",".join(exprs),
                "LabelValuesByName": values_by_name,
                "GroupBy": resource_lbl,
                "GroupBySlice": [resource_lbl],
            }
        )
        if not query:
            raise ResolutionError("empty query produced by metrics query template")
        return query

    def __repr__(self) -> str:
        return f"MetricNamer(series_query={self._series_query!r}, name={self._name_matches.pattern!r})"
