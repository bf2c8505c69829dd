"""
Declarative discovery rules.

A rule file looks like::

    rules:
    - seriesQuery: '{__name__=~"^container_.*",namespace!="",pod_name!=""}'
      seriesFilters:
      - isNot: "^container_.*_seconds_total$"
      resources:
        overrides:
          namespace: {resource: namespace}
          pod_name: {resource: pod}
      name:
        matches: "^container_(.*)_total$"
      metricsQuery: 'sum(rate(<<.Series>>{<<.LabelMatchers>>}[1m])) by (<<.GroupBy>>)'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import yaml

from promadapter.core.errors import ConfigurationError
from promadapter.resources.models import GroupResource


def _expect_mapping(data: Any, what: str) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"{what} must be a mapping, got {type(data).__name__}",
            details={"section": what},
        )
    return data


def _expect_str(data: dict[str, Any], key: str, what: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigurationError(
            f"{what}.{key} must be a string, got {type(value).__name__}",
            details={"section": what, "key": key},
        )
    return value


@dataclass
class RegexFilter:
    """Positive (``is``) or negative (``isNot``) filter on the series name."""

    is_: str = ""
    is_not: str = ""

    def to_dict(self) -> dict[str, str]:
        data = {}
        if self.is_:
            data["is"] = self.is_
        if self.is_not:
            data["isNot"] = self.is_not
        return data

    @classmethod
    def from_dict(cls, data: Any) -> RegexFilter:
        data = _expect_mapping(data, "seriesFilters[]")
        return cls(
            is_=_expect_str(data, "is", "seriesFilters[]"),
            is_not=_expect_str(data, "isNot", "seriesFilters[]"),
        )


@dataclass
class ResourceMapping:
    """How series labels map to resources: a label template and/or overrides."""

    template: str = ""
    overrides: dict[str, GroupResource] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.template:
            data["template"] = self.template
        if self.overrides:
            data["overrides"] = {
                label: {k: v for k, v in res.to_dict().items() if v}
                for label, res in self.overrides.items()
            }
        return data

    @classmethod
    def from_dict(cls, data: Any) -> ResourceMapping:
        data = _expect_mapping(data, "resources")
        overrides = {}
        for label, res in _expect_mapping(data.get("overrides"), "resources.overrides").items():
            res = _expect_mapping(res, f"resources.overrides.{label}")
            overrides[str(label)] = GroupResource(
                group=_expect_str(res, "group", f"resources.overrides.{label}"),
                resource=_expect_str(res, "resource", f"resources.overrides.{label}"),
            )
        return cls(
            template=_expect_str(data, "template", "resources"),
            overrides=overrides,
        )


@dataclass
class NameMapping:
    """Regex over the series name plus the substitution producing the metric name."""

    matches: str = ""
    as_: str = ""

    def to_dict(self) -> dict[str, str]:
        data = {}
        if self.matches:
            data["matches"] = self.matches
        if self.as_:
            data["as"] = self.as_
        return data

    @classmethod
    def from_dict(cls, data: Any) -> NameMapping:
        data = _expect_mapping(data, "name")
        return cls(
            matches=_expect_str(data, "matches", "name"),
            as_=_expect_str(data, "as", "name"),
        )


@dataclass
class DiscoveryRule:
    """One declarative rule describing a family of series."""

    series_query: str = ""
    series_filters: list[RegexFilter] = field(default_factory=list)
    resources: ResourceMapping = field(default_factory=ResourceMapping)
    name: NameMapping = field(default_factory=NameMapping)
    metrics_query: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"seriesQuery": self.series_query}
        if self.series_filters:
            data["seriesFilters"] = [f.to_dict() for f in self.series_filters]
        resources = self.resources.to_dict()
        if resources:
            data["resources"] = resources
        name = self.name.to_dict()
        if name:
            data["name"] = name
        data["metricsQuery"] = self.metrics_query
        return data

    @classmethod
    def from_dict(cls, data: Any) -> DiscoveryRule:
        data = _expect_mapping(data, "rules[]")
        filters = data.get("seriesFilters") or []
        if not isinstance(filters, list):
            raise ConfigurationError(
                "seriesFilters must be a list",
                details={"series_query": data.get("seriesQuery", "")},
            )
        return cls(
            series_query=_expect_str(data, "seriesQuery", "rules[]"),
            series_filters=[RegexFilter.from_dict(f) for f in filters],
            resources=ResourceMapping.from_dict(data.get("resources")),
            name=NameMapping.from_dict(data.get("name")),
            metrics_query=_expect_str(data, "metricsQuery", "rules[]"),
        )


@dataclass
class MetricsDiscoveryConfig:
    """An ordered rule set; earlier rules take priority during discovery."""

    rules: list[DiscoveryRule] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"rules": [rule.to_dict() for rule in self.rules]}

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, default_flow_style=False)

    @classmethod
    def from_dict(cls, data: Any) -> MetricsDiscoveryConfig:
        data = _expect_mapping(data, "config")
        rules = data.get("rules") or []
        if not isinstance(rules, list):
            raise ConfigurationError("rules must be a list", details={"section": "rules"})
        return cls(rules=[DiscoveryRule.from_dict(rule) for rule in rules])
