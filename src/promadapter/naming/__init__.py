"""
Metric naming and discovery rule engine.

Compiles declarative rules into namers that classify Prometheus series
into resource-scoped metrics and render per-resource queries.
"""

from promadapter.naming.builder import namer_from_rule, namers_from_config
from promadapter.naming.extractor import LabelGroupResExtractor
from promadapter.naming.matchers import ReMatcher, expand
from promadapter.naming.namer import MetricNamer
from promadapter.naming.templates import (
    LABEL_TEMPLATE_FIELDS,
    QUERY_TEMPLATE_FIELDS,
    Template,
    label_template,
    query_template,
)

__all__ = [
    "MetricNamer",
    "namers_from_config",
    "namer_from_rule",
    "ReMatcher",
    "expand",
    "LabelGroupResExtractor",
    "Template",
    "label_template",
    "query_template",
    "LABEL_TEMPLATE_FIELDS",
    "QUERY_TEMPLATE_FIELDS",
]
