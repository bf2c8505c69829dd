"""
Compiles a declarative rule set into metric namers.

Compilation is all-or-nothing: the first invalid rule aborts the build
with an error naming the rule, so a partially compiled rule set is never
served.  Namers come back in rule order; the discovery layer treats
earlier rules as higher priority.
"""

from __future__ import annotations

import re

import structlog

from promadapter.config.models import DiscoveryRule, MetricsDiscoveryConfig, RegexFilter
from promadapter.core.errors import AdapterError, ConfigurationError
from promadapter.naming.extractor import LabelGroupResExtractor
from promadapter.naming.matchers import ReMatcher, compile_pattern, default_substitution
from promadapter.naming.namer import MetricNamer
from promadapter.naming.templates import Template, label_template, query_template
from promadapter.resources.mapper import ResourceMapper
from promadapter.resources.models import GroupResource

logger = structlog.get_logger()

# matches every series name; emitted unchanged via $0
_MATCH_ALL = re.compile(".*")


def _rule_error(index: int, rule: DiscoveryRule, message: str, cause: AdapterError) -> ConfigurationError:
    return ConfigurationError(
        f"rule {index}: {message} associated with series query {rule.series_query!r}: {cause.message}",
        details={"rule": index, "series_query": rule.series_query},
    )


def namer_from_rule(rule: DiscoveryRule, mapper: ResourceMapper, index: int = 0) -> MetricNamer:
    """Compile a single rule. ``index`` only feeds error messages."""
    label_tmpl: Template | None = None
    extractor: LabelGroupResExtractor | None = None
    if rule.resources.template:
        try:
            label_tmpl = label_template(rule.resources.template)
        except ConfigurationError as e:
            raise _rule_error(index, rule, f"unable to parse label template {rule.resources.template!r}", e) from e
        try:
            extractor = LabelGroupResExtractor(label_tmpl)
        except ConfigurationError as e:
            raise _rule_error(
                index, rule, f"unable to generate label format from template {rule.resources.template!r}", e
            ) from e

    try:
        metrics_query = query_template(rule.metrics_query)
    except ConfigurationError as e:
        raise _rule_error(index, rule, f"unable to parse metrics query template {rule.metrics_query!r}", e) from e

    series_matchers = []
    for raw_filter in rule.series_filters:
        try:
            series_matchers.append(ReMatcher.from_filter(raw_filter))
        except ConfigurationError as e:
            raise _rule_error(index, rule, "unable to generate series name filter", e) from e

    if rule.name.matches:
        try:
            series_matchers.append(ReMatcher.from_filter(RegexFilter(is_=rule.name.matches)))
            name_matches = compile_pattern(rule.name.matches, "series name match expression")
        except ConfigurationError as e:
            raise _rule_error(index, rule, "unable to generate series name filter from name rules", e) from e
    else:
        name_matches = _MATCH_ALL

    name_as = rule.name.as_
    if not name_as:
        name_as = default_substitution(name_matches) or ""
        if not name_as:
            raise ConfigurationError(
                f"rule {index}: must specify an 'as' value for name matcher {rule.name.matches!r} "
                f"associated with series query {rule.series_query!r}",
                details={"rule": index, "series_query": rule.series_query},
            )

    # invert the structure for consistency with the template
    overrides: dict[str, GroupResource] = {}
    for lbl, group_res in rule.resources.overrides.items():
        try:
            overrides[lbl] = mapper.normalize(group_res)
        except AdapterError as e:
            raise _rule_error(index, rule, f"unable to normalize group-resource {group_res} for label {lbl!r}", e) from e

    return MetricNamer(
        series_query=rule.series_query,
        metrics_query_template=metrics_query,
        mapper=mapper,
        name_matches=name_matches,
        name_as=name_as,
        series_matchers=series_matchers,
        label_template=label_tmpl,
        label_res_extractor=extractor,
        overrides=overrides,
    )


def namers_from_config(config: MetricsDiscoveryConfig, mapper: ResourceMapper) -> list[MetricNamer]:
    """Produce a MetricNamer for each rule in the given config."""
    namers = [namer_from_rule(rule, mapper, index) for index, rule in enumerate(config.rules)]
    logger.debug("compiled_rules", rules=len(namers))
    return namers
