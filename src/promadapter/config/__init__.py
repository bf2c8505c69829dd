"""
promadapter configuration.

- Declarative discovery rules (YAML rule files, built-in defaults)
- Pydantic-based process settings (environment variables, .env files)
"""

from promadapter.config.defaults import default_config, format_duration, parse_duration
from promadapter.config.loader import load_config, load_rules_file, parse_rules
from promadapter.config.models import (
    DiscoveryRule,
    MetricsDiscoveryConfig,
    NameMapping,
    RegexFilter,
    ResourceMapping,
)
from promadapter.config.settings import Settings, get_settings

__all__ = [
    # Rules
    "DiscoveryRule",
    "MetricsDiscoveryConfig",
    "NameMapping",
    "RegexFilter",
    "ResourceMapping",
    # Defaults
    "default_config",
    "format_duration",
    "parse_duration",
    # Loader
    "load_config",
    "load_rules_file",
    "parse_rules",
    # Settings
    "Settings",
    "get_settings",
]
