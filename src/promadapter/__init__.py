"""
promadapter: maps flat Prometheus series onto resource-scoped custom metrics.
"""

from promadapter.client import Series
from promadapter.config import MetricsDiscoveryConfig, default_config, load_config
from promadapter.core.errors import ConfigurationError, ResolutionError
from promadapter.naming import MetricNamer, namers_from_config
from promadapter.provider import CustomMetricInfo, MetricsProvider
from promadapter.resources import GroupResource, StaticResourceMapper, default_resource_mapper

__version__ = "0.1.0"

__all__ = [
    "Series",
    "GroupResource",
    "MetricsDiscoveryConfig",
    "default_config",
    "load_config",
    "MetricNamer",
    "namers_from_config",
    "MetricsProvider",
    "CustomMetricInfo",
    "StaticResourceMapper",
    "default_resource_mapper",
    "ConfigurationError",
    "ResolutionError",
]
