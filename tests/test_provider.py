"""Tests for provider.py.

Runs discovery passes over the default rule set against a fake series client.
"""

from datetime import timedelta

import pytest

from promadapter.client.models import Series
from promadapter.client.selectors import label_neq, match_series, name_matches, name_not_matches
from promadapter.config.defaults import default_config
from promadapter.config.models import DiscoveryRule, MetricsDiscoveryConfig, NameMapping, ResourceMapping
from promadapter.core.errors import ConfigurationError, ResolutionError
from promadapter.provider import CustomMetricInfo, MetricsProvider
from promadapter.resources.models import GroupResource

CONTAINER_SELECTOR = match_series(
    "",
    name_matches("^container_.*"),
    label_neq("container_name", "POD"),
    label_neq("namespace", ""),
    label_neq("pod_name", ""),
)
NAMESPACED_SELECTOR = match_series("", label_neq("namespace", ""), name_not_matches("^container_.*"))

PODS = GroupResource(resource="pods")
SERVICES = GroupResource(resource="services")
NAMESPACES = GroupResource(resource="namespaces")
INGRESSES = GroupResource(group="networking.k8s.io", resource="ingresses")
DEPLOYMENTS = GroupResource(group="apps", resource="deployments")


@pytest.fixture
def provider(mapper):
    return MetricsProvider.from_config(default_config(timedelta(minutes=1)), mapper)


@pytest.fixture
def client(fake_client):
    fake_client.series_by_selector = {
        CONTAINER_SELECTOR: [
            Series(
                "container_some_usage",
                {"pod_name": "somepod", "namespace": "somens", "container_name": "somecont"},
            ),
        ],
        NAMESPACED_SELECTOR: [
            Series(
                "ingress_hits_total",
                {"ingress": "someingress", "service": "somesvc", "pod": "backend1", "namespace": "somens"},
            ),
            Series(
                "ingress_hits_total",
                {"ingress": "someingress", "service": "somesvc", "pod": "backend2", "namespace": "somens"},
            ),
            Series("service_proxy_packets", {"service": "somesvc", "namespace": "somens"}),
            Series("work_queue_wait_seconds_total", {"deployment": "somedep", "namespace": "somens"}),
        ],
    }
    return fake_client


class TestCustomMetricInfo:
    """Tests for CustomMetricInfo."""

    def test_str(self):
        assert str(CustomMetricInfo(DEPLOYMENTS, True, "hits")) == "deployments.apps/hits (namespaced)"
        assert str(CustomMetricInfo(NAMESPACES, False, "hits")) == "namespaces/hits (root-scoped)"

    def test_to_dict(self):
        assert CustomMetricInfo(PODS, True, "hits").to_dict() == {
            "group": "",
            "resource": "pods",
            "namespaced": True,
            "metric": "hits",
        }


class TestUpdateMetrics:
    """Tests for the discovery pass."""

    def test_no_metrics_before_first_pass(self, provider):
        assert provider.list_all_metrics() == []

    def test_list_all_metrics(self, provider, client):
        provider.update_metrics(client)
        actual = sorted(provider.list_all_metrics(), key=CustomMetricInfo.sort_key)

        expected = sorted(
            [
                CustomMetricInfo(SERVICES, True, "ingress_hits"),
                CustomMetricInfo(INGRESSES, True, "ingress_hits"),
                CustomMetricInfo(PODS, True, "ingress_hits"),
                CustomMetricInfo(NAMESPACES, False, "ingress_hits"),
                CustomMetricInfo(SERVICES, True, "service_proxy_packets"),
                CustomMetricInfo(NAMESPACES, False, "service_proxy_packets"),
                CustomMetricInfo(DEPLOYMENTS, True, "work_queue_wait"),
                CustomMetricInfo(NAMESPACES, False, "work_queue_wait"),
                CustomMetricInfo(NAMESPACES, False, "some_usage"),
                CustomMetricInfo(PODS, True, "some_usage"),
            ],
            key=CustomMetricInfo.sort_key,
        )
        assert actual == expected

    def test_returns_published_index(self, provider, client):
        assert sorted(provider.update_metrics(client), key=CustomMetricInfo.sort_key) == sorted(
            provider.list_all_metrics(), key=CustomMetricInfo.sort_key
        )

    def test_queries_each_rule_selector(self, provider, client):
        provider.update_metrics(client)
        assert client.calls == [(CONTAINER_SELECTOR,)] * 3 + [(NAMESPACED_SELECTOR,)] * 3

    def test_client_error_keeps_previous_index(self, provider, client):
        provider.update_metrics(client)
        before = provider.list_all_metrics()

        client.errors = {NAMESPACED_SELECTOR: RuntimeError("backend unavailable")}
        with pytest.raises(RuntimeError):
            provider.update_metrics(client)
        assert provider.list_all_metrics() == before

    def test_first_rule_wins(self, mapper, fake_client):
        config = MetricsDiscoveryConfig(
            rules=[
                DiscoveryRule(
                    series_query="first",
                    resources=ResourceMapping(template="<<.Resource>>"),
                    name=NameMapping(matches="^(.*)_total$"),
                    metrics_query="first(<<.Series>>{<<.LabelMatchers>>})",
                ),
                DiscoveryRule(
                    series_query="second",
                    resources=ResourceMapping(template="<<.Resource>>"),
                    name=NameMapping(matches="^(.*)_count$"),
                    metrics_query="second(<<.Series>>{<<.LabelMatchers>>})",
                ),
            ]
        )
        fake_client.series_by_selector = {
            "first": [Series("hits_total", {"pod": "a"})],
            "second": [Series("hits_count", {"pod": "a"})],
        }
        provider = MetricsProvider.from_config(config, mapper)
        assert provider.update_metrics(fake_client) == [CustomMetricInfo(PODS, False, "hits")]
        assert provider.query_for_metric(CustomMetricInfo(PODS, False, "hits"), "", "a") == (
            'first(hits_total{pod="a"})'
        )

    def test_unnameable_series_are_skipped(self, mapper, fake_client, monkeypatch):
        config = MetricsDiscoveryConfig(
            rules=[
                DiscoveryRule(
                    series_query="all",
                    resources=ResourceMapping(template="<<.Resource>>"),
                    metrics_query="<<.Series>>",
                ),
            ]
        )
        fake_client.series_by_selector = {
            "all": [Series("broken", {"pod": "p"}), Series("hits", {"pod": "p"})],
        }
        provider = MetricsProvider.from_config(config, mapper)
        namer = provider.namers[0]
        metric_name_for_series = namer.metric_name_for_series

        def flaky(series):
            if series.name == "broken":
                raise ResolutionError("cannot name")
            return metric_name_for_series(series)

        monkeypatch.setattr(namer, "metric_name_for_series", flaky)
        assert provider.update_metrics(fake_client) == [CustomMetricInfo(PODS, False, "hits")]


class TestQueryForMetric:
    """Tests for query_for_metric."""

    def test_template_rule(self, provider, client):
        provider.update_metrics(client)
        query = provider.query_for_metric(CustomMetricInfo(PODS, True, "ingress_hits"), "somens", "backend1")
        assert query == 'sum(rate(ingress_hits_total{namespace="somens",pod="backend1"}[1m])) by (pod)'

    def test_override_rule(self, provider, client):
        provider.update_metrics(client)
        query = provider.query_for_metric(CustomMetricInfo(PODS, True, "some_usage"), "somens", "somepod")
        assert query == (
            'sum(container_some_usage{namespace="somens",pod_name="somepod",container_name!="POD"}) by (pod_name)'
        )

    def test_several_names(self, provider, client):
        provider.update_metrics(client)
        query = provider.query_for_metric(
            CustomMetricInfo(DEPLOYMENTS, True, "work_queue_wait"), "somens", "a", "b"
        )
        assert query == (
            'sum(rate(work_queue_wait_seconds_total{namespace="somens",deployment=~"a|b"}[1m])) by (deployment)'
        )

    def test_unknown_metric(self, provider, client):
        provider.update_metrics(client)
        with pytest.raises(ResolutionError, match="no series found"):
            provider.query_for_metric(CustomMetricInfo(PODS, True, "missing"), "somens", "a")


class TestReload:
    """Tests for swapping in a new rule set."""

    def test_reload_swaps_namers(self, provider, client):
        provider.reload(MetricsDiscoveryConfig(rules=[DiscoveryRule(series_query="x", metrics_query="<<.Series>>")]))
        assert [n.selector() for n in provider.namers] == ["x"]

    def test_invalid_reload_keeps_namers(self, provider):
        before = provider.namers
        bad = MetricsDiscoveryConfig(rules=[DiscoveryRule(series_query="x", name=NameMapping(matches="("))])
        with pytest.raises(ConfigurationError):
            provider.reload(bad)
        assert provider.namers is before

    def test_index_kept_until_next_pass(self, provider, client):
        provider.update_metrics(client)
        count = len(provider.list_all_metrics())
        provider.reload(default_config())
        assert len(provider.list_all_metrics()) == count
