"""Tests for ScrapeCycle using the stub API from tests/payloads.py."""

import threading

from catchpoint_exporter.collector.base import UpstreamError
from catchpoint_exporter.collector.models import (
    NodeRunRateResponse,
    NodeStatusResponse,
    SLAPurgeItemsResponse,
)
from catchpoint_exporter.collector.scrape import ScrapeCycle
from catchpoint_exporter.config import Config, RateLimiter
from catchpoint_exporter.metrics import (
    METRICS,
    NODE_STATUS,
    REQUEST_SLIPPAGE,
    RUN_RATE,
    SLA_PURGE_ITEMS_COUNT,
    TEST_ERROR_BY_IP,
    TEST_ERROR_BY_TYPE,
    TEST_ERROR_TOTAL_COUNT,
    TOTAL_TEST_RUNS_COUNT,
    UP,
    USAGE_PERCENTAGE,
)
from tests.payloads import (
    StubCatchpointAPI,
    failing,
    node_status_payload,
    run_rate_payload,
    sla_payload,
)


class CountingRateLimiter(RateLimiter):
    def __init__(self):
        super().__init__(0)
        self.waits = 0

    def wait(self):
        self.waits += 1


def _values(observations, name):
    return {tuple(sorted(o.labels.items())): o.value for o in observations if o.name == name}


def test_success_scenario(stub_api, config):
    obs = ScrapeCycle(stub_api, config).run()

    assert _values(obs, NODE_STATUS) == {(("node_id", "1"), ("node_name", "Node 1")): 1}
    assert _values(obs, SLA_PURGE_ITEMS_COUNT) == {(("status_id", "Active"),): 1}
    assert _values(obs, TEST_ERROR_TOTAL_COUNT) == {(): 15}
    assert {k[0][1]: v for k, v in _values(obs, TEST_ERROR_BY_TYPE).items()} == {
        "DNS": 6, "Connection": 4, "SSL": 3, "NoResponse": 2,
    }
    assert len(_values(obs, TEST_ERROR_BY_IP)) == 4
    assert _values(obs, UP) == {(): 1}


def test_success_scenario_covers_every_metric_family(stub_api, config):
    names = {o.name for o in ScrapeCycle(stub_api, config).run()}
    assert names == {spec.name for spec in METRICS}


def test_up_is_last(stub_api, config):
    obs = ScrapeCycle(stub_api, config).run()
    assert obs[-1].name == UP
    assert [o.name for o in obs].count(UP) == 1


def test_all_fetches_failing_leaves_only_up(config):
    api = StubCatchpointAPI(**failing())
    obs = ScrapeCycle(api, config).run()
    assert [(o.name, o.labels, o.value) for o in obs] == [(UP, {}, 1)]


def test_every_fetch_still_attempted_when_all_fail():
    config = Config(bearer_token="t", node_ids=(1, 2), rate_limiter=RateLimiter(0))
    api = StubCatchpointAPI(**failing())
    ScrapeCycle(api, config).run()
    assert len(api.calls) == 3 + 4 * 2


def test_one_node_failing_does_not_affect_others():
    config = Config(bearer_token="t", node_ids=(1, 2, 3), rate_limiter=RateLimiter(0))

    def node_status(node_id):
        if node_id == 2:
            return UpstreamError("boom", status_code=503)
        return NodeStatusResponse.model_validate(node_status_payload(node_id, f"Node {node_id}"))

    api = StubCatchpointAPI(fetch_node_status=node_status)
    obs = ScrapeCycle(api, config).run()

    node_ids = sorted(o.labels["node_id"] for o in obs if o.name == NODE_STATUS)
    assert node_ids == ["1", "3"]
    # later resources and per-node fetches for node 2 still happen
    assert ("fetch_node_test_runs", 2) in api.calls
    assert _values(obs, TEST_ERROR_TOTAL_COUNT) == {(): 15}


def test_single_resource_failure_is_isolated(stub_api, config):
    stub_api.responses.update(failing(["fetch_test_errors_raw", "fetch_node_run_rate"]))
    names = {o.name for o in ScrapeCycle(stub_api, config).run()}

    assert TEST_ERROR_TOTAL_COUNT not in names
    assert RUN_RATE not in names
    assert NODE_STATUS in names
    assert SLA_PURGE_ITEMS_COUNT in names
    assert USAGE_PERCENTAGE in names
    assert TOTAL_TEST_RUNS_COUNT in names
    assert UP in names


def test_empty_sla_list_reports_no_data(stub_api, config):
    stub_api.responses["fetch_sla_purge_items"] = SLAPurgeItemsResponse.model_validate(sla_payload())
    obs = ScrapeCycle(stub_api, config).run()
    assert _values(obs, SLA_PURGE_ITEMS_COUNT) == {(("status_id", "no_data"),): 0}


def test_unknown_node_reports_no_data(stub_api, config):
    stub_api.responses["fetch_node_status"] = NodeStatusResponse.model_validate({"data": {"nodes": []}})
    obs = ScrapeCycle(stub_api, config).run()
    assert _values(obs, NODE_STATUS) == {(("node_id", "1"), ("node_name", "no_data")): 0}


def test_empty_run_rate_series_skips_only_that_node(stub_api):
    config = Config(bearer_token="t", node_ids=(1, 2), rate_limiter=RateLimiter(0))

    def run_rate(node_id):
        slippages = () if node_id == 1 else (40,)
        return NodeRunRateResponse.model_validate(
            run_rate_payload(node_id, f"Node {node_id}", slippages=slippages)
        )

    stub_api.responses["fetch_node_run_rate"] = run_rate
    obs = ScrapeCycle(stub_api, config).run()

    assert _values(obs, REQUEST_SLIPPAGE) == {(("node_id", "2"), ("node_name", "Node 2")): 40}
    assert _values(obs, RUN_RATE) == {(("node_id", "2"), ("node_name", "Node 2")): 95}
    assert _values(obs, UP) == {(): 1}


def test_missing_config_emits_nothing(stub_api):
    assert ScrapeCycle(stub_api, None).run() == []
    assert stub_api.calls == []


def test_missing_api_emits_nothing(config):
    assert ScrapeCycle(None, config).run() == []


def test_fetch_order_is_fixed(stub_api):
    config = Config(bearer_token="t", node_ids=(1, 2), rate_limiter=RateLimiter(0))
    ScrapeCycle(stub_api, config).run()
    assert stub_api.calls == [
        ("fetch_node_status", 1),
        ("fetch_node_status", 2),
        ("fetch_sla_purge_items", None),
        ("fetch_test_errors_raw", None),
        ("fetch_alerts", None),
        ("fetch_node_test_runs", 1),
        ("fetch_node_run_rate", 1),
        ("fetch_node_test_run_count", 1),
        ("fetch_node_test_runs", 2),
        ("fetch_node_run_rate", 2),
        ("fetch_node_test_run_count", 2),
    ]


def test_rate_limiter_paces_every_fetch(stub_api):
    limiter = CountingRateLimiter()
    config = Config(bearer_token="t", node_ids=(1, 2, 3), rate_limiter=limiter)
    ScrapeCycle(stub_api, config).run()
    assert limiter.waits == len(stub_api.calls) == 3 + 4 * 3


def test_no_nodes_still_fetches_global_resources(stub_api):
    config = Config(bearer_token="t", node_ids=(), rate_limiter=RateLimiter(0))
    obs = ScrapeCycle(stub_api, config).run()
    assert [call for call, _ in stub_api.calls] == [
        "fetch_sla_purge_items", "fetch_test_errors_raw", "fetch_alerts",
    ]
    assert NODE_STATUS not in {o.name for o in obs}


def test_concurrent_cycles_do_not_share_state(config):
    results = []

    def scrape():
        results.append(ScrapeCycle(StubCatchpointAPI(), config).run())

    threads = [threading.Thread(target=scrape) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 4
    expected = [(o.name, o.labels, o.value) for o in results[0]]
    for obs in results[1:]:
        assert [(o.name, o.labels, o.value) for o in obs] == expected
    assert all(len(obs) == len(expected) for obs in results)