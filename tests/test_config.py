"""Tests for config/models.py, config/loader.py, config/defaults.py and config/settings.py."""

from datetime import timedelta

import pytest
import yaml

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
from promadapter.core.errors import ConfigurationError
from promadapter.resources.models import GroupResource

RULES_YAML = """
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
- seriesQuery: '{namespace!=""}'
  resources:
    template: "<<.Resource>>"
  name:
    matches: "^(.*)_requests$"
    as: "${1}_per_second"
  metricsQuery: 'sum(<<.Series>>{<<.LabelMatchers>>}) by (<<.GroupBy>>)'
"""


@pytest.fixture
def rules_file(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(RULES_YAML)
    return path


class TestModels:
    """Tests for rule dataclasses."""

    def test_parse_rules(self):
        config = parse_rules(RULES_YAML)
        assert len(config.rules) == 2

        first = config.rules[0]
        assert first.series_query == '{__name__=~"^container_.*",namespace!="",pod_name!=""}'
        assert first.series_filters == [RegexFilter(is_not="^container_.*_seconds_total$")]
        assert first.resources.overrides == {
            "namespace": GroupResource(resource="namespace"),
            "pod_name": GroupResource(resource="pod"),
        }
        assert first.name == NameMapping(matches="^container_(.*)_total$")

        second = config.rules[1]
        assert second.resources.template == "<<.Resource>>"
        assert second.name.as_ == "${1}_per_second"

    def test_to_dict_uses_file_keys(self):
        rule = DiscoveryRule(
            series_query='{namespace!=""}',
            series_filters=[RegexFilter(is_="^http_")],
            resources=ResourceMapping(overrides={"pod": GroupResource(resource="pods")}),
            name=NameMapping(matches="^(.*)$", as_="$1"),
            metrics_query="<<.Series>>",
        )
        assert rule.to_dict() == {
            "seriesQuery": '{namespace!=""}',
            "seriesFilters": [{"is": "^http_"}],
            "resources": {"overrides": {"pod": {"resource": "pods"}}},
            "name": {"matches": "^(.*)$", "as": "$1"},
            "metricsQuery": "<<.Series>>",
        }

    def test_yaml_round_trip(self):
        config = parse_rules(RULES_YAML)
        assert parse_rules(config.to_yaml()) == config

    def test_empty_document(self):
        assert parse_rules("") == MetricsDiscoveryConfig()

    def test_rules_must_be_list(self):
        with pytest.raises(ConfigurationError, match="rules must be a list"):
            parse_rules("rules: {seriesQuery: up}")

    def test_rule_must_be_mapping(self):
        with pytest.raises(ConfigurationError, match="must be a mapping"):
            parse_rules("rules: [up]")

    def test_series_filters_must_be_list(self):
        with pytest.raises(ConfigurationError, match="seriesFilters must be a list"):
            parse_rules("rules: [{seriesQuery: up, seriesFilters: {is: x}}]")

    def test_string_fields_are_checked(self):
        with pytest.raises(ConfigurationError, match="must be a string"):
            parse_rules("rules: [{seriesQuery: up, metricsQuery: 3}]")

    def test_invalid_yaml(self):
        with pytest.raises(ConfigurationError, match="unable to parse rule file"):
            parse_rules("rules: [{seriesQuery: 'up'")


class TestLoader:
    """Tests for rule file loading."""

    def test_load_rules_file(self, rules_file):
        config = load_rules_file(rules_file)
        assert len(config.rules) == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            load_rules_file(tmp_path / "missing.yaml")
        assert exc_info.value.details["path"].endswith("missing.yaml")

    def test_explicit_path_wins(self, rules_file):
        settings = Settings(config_file="/nonexistent/rules.yaml")
        assert len(load_config(rules_file, settings).rules) == 2

    def test_configured_file(self, rules_file):
        settings = Settings(config_file=str(rules_file))
        assert len(load_config(settings=settings).rules) == 2

    def test_falls_back_to_defaults(self):
        settings = Settings(rate_interval="1m", label_prefix="kube_")
        assert load_config(settings=settings) == default_config(timedelta(minutes=1), "kube_")

    def test_env_config_file(self, rules_file, monkeypatch):
        monkeypatch.setenv("PROMADAPTER_CONFIG_FILE", str(rules_file))
        get_settings.cache_clear()
        assert len(load_config().rules) == 2


class TestDurations:
    """Tests for Prometheus duration helpers."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (timedelta(minutes=5), "5m"),
            (timedelta(seconds=90), "1m30s"),
            (timedelta(hours=1, minutes=30), "1h30m"),
            (timedelta(days=1), "1d"),
            (timedelta(weeks=2), "2w"),
            (timedelta(milliseconds=1500), "1s500ms"),
            (timedelta(0), "0s"),
        ],
    )
    def test_format_duration(self, value, expected):
        assert format_duration(value) == expected

    def test_parse_duration(self):
        assert parse_duration("5m") == timedelta(minutes=5)
        assert parse_duration("1h30m") == timedelta(hours=1, minutes=30)
        assert parse_duration("250ms") == timedelta(milliseconds=250)

    @pytest.mark.parametrize("text", ["", "5", "m", "5x", "-1m"])
    def test_parse_duration_invalid(self, text):
        with pytest.raises(ConfigurationError, match="invalid duration"):
            parse_duration(text)


class TestDefaultConfig:
    """Tests for the built-in rule set."""

    def test_six_rules(self):
        assert len(default_config().rules) == 6

    def test_rate_interval_in_queries(self):
        config = default_config(timedelta(seconds=90))
        assert "[1m30s]" in config.rules[0].metrics_query
        assert "[1m30s]" not in config.rules[2].metrics_query

    def test_string_rate_interval(self):
        assert default_config("2m") == default_config(timedelta(minutes=2))

    def test_container_rules(self):
        rule = default_config().rules[0]
        assert rule.series_query == (
            '{__name__=~"^container_.*",container_name!="POD",namespace!="",pod_name!=""}'
        )
        assert rule.resources.overrides == {
            "namespace": GroupResource(resource="namespace"),
            "pod_name": GroupResource(resource="pod"),
        }
        assert rule.name.matches == "^container_(.*)_seconds_total$"
        assert rule.metrics_query == (
            'sum(rate(<<.Series>>{<<.LabelMatchers>>,container_name!="POD"}[5m])) by (<<.GroupBy>>)'
        )

    def test_label_prefix(self):
        config = default_config(label_prefix="kube_")
        normal = config.rules[3]
        assert normal.series_query == '{kube_namespace!="",__name__!~"^container_.*"}'
        assert normal.resources.template == "kube_<<.Resource>>"
        # container rules keep the cAdvisor labels
        assert "namespace" in config.rules[0].resources.overrides

    def test_yaml_is_loadable(self):
        config = default_config()
        data = yaml.safe_load(config.to_yaml())
        assert len(data["rules"]) == 6
        assert parse_rules(config.to_yaml()) == config


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        settings = Settings()
        assert settings.config_file is None
        assert settings.rate_interval == "5m"
        assert settings.log_level == "INFO"

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("PROMADAPTER_LABEL_PREFIX", "kube_")
        assert Settings().label_prefix == "kube_"

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
