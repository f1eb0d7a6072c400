"""Payload builders and a scriptable stand-in for the Catchpoint API."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Tuple

from catchpoint_exporter.collector.base import CatchpointAPI, UpstreamError
from catchpoint_exporter.collector.models import (
    AlertsResponse,
    ErrorsRawResponse,
    NodeRunRateResponse,
    NodeStatusResponse,
    NodeTestRunResponse,
    RunCountResponse,
    SLAPurgeItemsResponse,
)


def node_status_payload(node_id: int = 1, name: str = "Node 1", status: str = "active") -> dict:
    return {"data": {"nodes": [{"id": node_id, "name": name, "status": {"id": 1, "name": status}}]},
            "completed": True}


def sla_payload(*statuses: str) -> dict:
    items = [{"id": i, "statusType": {"id": i, "name": s}} for i, s in enumerate(statuses)]
    return {"data": {"slaItems": items}, "completed": True}


def errors_payload(*summaries: Tuple[List[float], List[str]]) -> dict:
    summary_items = [
        {"values": values, "dimensions": [{"id": i, "name": n} for i, n in enumerate(dims)]}
        for values, dims in summaries
    ]
    return {"data": {"responseItems": [{"summaryItems": summary_items}]}, "completed": True}


def alert(level: str, test_id: int = 1, test_name: str = "Test 1",
          node_id: int = 1, node_name: str = "Node 1") -> dict:
    return {
        "level": {"id": 1, "name": level},
        "test": {"id": test_id, "name": test_name},
        "node": {"id": node_id, "name": node_name},
    }


def alerts_payload(*alerts: dict) -> dict:
    return {"data": {"alerts": list(alerts)}, "completed": True}


def node_test_runs_payload() -> dict:
    return {"data": {"testRuns": [{
        "testId": 1,
        "testName": "Test 1",
        "divisionName": "Division 1",
        "runs": 10,
        "usagePercentage": 75.0,
        "downTimePercentage": 5.0,
        "monitorGroup": {"id": 1, "name": "Browser"},
    }]}, "completed": True}


def run_rate_payload(node_id: int = 1, name: str = "Node 1",
                     slippages=(100,), run_rates=(95,)) -> dict:
    return {"data": {
        "node": {"node": {"id": node_id, "name": name}},
        "requestSlippages": [{"value": v} for v in slippages],
        "runRates": [{"value": v} for v in run_rates],
    }, "completed": True}


def run_count_payload(node_id: int = 1, name: str = "Node 1",
                      all_runs=((25,), (10,)), unique_runs=((25,),)) -> dict:
    def buckets(series):
        return [{"monitorSetType": {"id": 1, "name": "Browser"},
                 "data": [{"value": v} for v in values]} for values in series]

    return {"data": {
        "node": {"id": node_id, "name": name},
        "allTestRuns": buckets(all_runs),
        "uniqueTestRuns": buckets(unique_runs),
    }, "completed": True}


SCENARIO_ERRORS = errors_payload(
    ([6], ["ErrorType:DNS", "HostIP:192.0.2.1"]),
    ([4], ["ErrorType:Connection", "HostIP:198.51.100.1"]),
    ([3], ["ErrorType:SSL", "HostIP:203.0.113.1"]),
    ([2], ["ErrorType:NoResponse", "HostIP:192.0.2.2"]),
)


def default_responses() -> Dict[str, Any]:
    return {
        "fetch_node_status": NodeStatusResponse.model_validate(node_status_payload()),
        "fetch_sla_purge_items": SLAPurgeItemsResponse.model_validate(sla_payload("Active")),
        "fetch_test_errors_raw": ErrorsRawResponse.model_validate(SCENARIO_ERRORS),
        "fetch_alerts": AlertsResponse.model_validate(alerts_payload(
            alert("Critical"),
            alert("Warning", test_id=2, test_name="Test 2"),
        )),
        "fetch_node_test_runs": NodeTestRunResponse.model_validate(node_test_runs_payload()),
        "fetch_node_run_rate": NodeRunRateResponse.model_validate(run_rate_payload()),
        "fetch_node_test_run_count": RunCountResponse.model_validate(run_count_payload()),
    }


class StubCatchpointAPI(CatchpointAPI):
    """Answers each fetch from a table.

    A table entry can be a parsed response, an exception to raise, or a
    callable taking the node id (or nothing) and returning either.
    Every call is recorded in `calls` as (method, node_id).
    """

    def __init__(self, **overrides: Any):
        self.responses = default_responses()
        self.responses.update(overrides)
        self.calls: List[Tuple[str, Any]] = []

    def _answer(self, method: str, *args):
        self.calls.append((method, args[0] if args else None))
        answer = self.responses[method]
        if callable(answer) and not isinstance(answer, type):
            answer = answer(*args)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def fetch_node_status(self, node_id):
        return self._answer("fetch_node_status", node_id)

    def fetch_sla_purge_items(self):
        return self._answer("fetch_sla_purge_items")

    def fetch_test_errors_raw(self):
        return self._answer("fetch_test_errors_raw")

    def fetch_alerts(self):
        return self._answer("fetch_alerts")

    def fetch_node_test_runs(self, node_id):
        return self._answer("fetch_node_test_runs", node_id)

    def fetch_node_run_rate(self, node_id):
        return self._answer("fetch_node_run_rate", node_id)

    def fetch_node_test_run_count(self, node_id):
        return self._answer("fetch_node_test_run_count", node_id)

    def name(self) -> str:
        return "stub"


ALL_FETCHES = (
    "fetch_node_status",
    "fetch_sla_purge_items",
    "fetch_test_errors_raw",
    "fetch_alerts",
    "fetch_node_test_runs",
    "fetch_node_run_rate",
    "fetch_node_test_run_count",
)


def failing(method_names=ALL_FETCHES) -> Dict[str, Callable]:
    def boom(*args):
        return UpstreamError("simulated API error", status_code=500)

    return {name: boom for name in method_names}
