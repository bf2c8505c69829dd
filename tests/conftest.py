"""Root test configuration."""

import logging

import pytest
import structlog

from promadapter.config.settings import get_settings
from promadapter.resources.mapper import default_resource_mapper


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


class FakeSeriesClient:
    """In-memory SeriesClient answering from a selector -> series table."""

    def __init__(self, series=None, errors=None):
        self.series_by_selector = series or {}
        self.errors = errors or {}
        self.calls = []

    def series(self, *selectors):
        self.calls.append(selectors)
        result = []
        for selector in selectors:
            if selector in self.errors:
                raise self.errors[selector]
            result.extend(self.series_by_selector.get(selector, []))
        return result

    def query(self, query, time=None):
        return {"resultType": "vector", "result": []}


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate tests from PROMADAPTER_* variables in the environment."""
    for name in ("CONFIG_FILE", "LABEL_PREFIX", "RATE_INTERVAL", "LOG_LEVEL", "LOG_JSON"):
        monkeypatch.delenv(f"PROMADAPTER_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mapper():
    """Static resource mapper with the default kinds."""
    return default_resource_mapper()


@pytest.fixture
def fake_client():
    return FakeSeriesClient()

