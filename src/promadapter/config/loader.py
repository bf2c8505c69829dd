"""
Rule file loading.

Search order:
1. Explicit path (--config flag or PROMADAPTER_CONFIG_FILE)
2. Built-in default rule set
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml

from promadapter.config.defaults import default_config
from promadapter.config.models import MetricsDiscoveryConfig
from promadapter.config.settings import Settings, get_settings
from promadapter.core.errors import ConfigurationError

logger = structlog.get_logger()


def parse_rules(text: str, source: str = "<string>") -> MetricsDiscoveryConfig:
    """Parse a YAML rule document."""
    try:
        data: Any = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"unable to parse rule file: {e}",
            details={"path": source},
        ) from e

    config = MetricsDiscoveryConfig.from_dict(data)
    logger.debug("loaded_rules", path=source, rules=len(config.rules))
    return config


def load_rules_file(path: str | Path) -> MetricsDiscoveryConfig:
    """Load a rule set from a YAML file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            f"unable to read rule file: {e.strerror or e}",
            details={"path": str(path)},
        ) from e
    return parse_rules(text, source=str(path))


def load_config(path: str | Path | None = None, settings: Settings | None = None) -> MetricsDiscoveryConfig:
    """
    Load the rule set to serve.

    An explicit path wins, then the configured rule file, then the
    built-in defaults parameterized by the settings.
    """
    settings = settings or get_settings()
    path = path or settings.config_file
    if path:
        return load_rules_file(path)

    logger.info(
        "using_default_rules",
        rate_interval=settings.rate_interval,
        label_prefix=settings.label_prefix,
    )
    return default_config(settings.rate_interval, settings.label_prefix)
