"""
Turn parsed Catchpoint payloads into flat gauge Observations.

One function per endpoint. They keep no state between calls, so concurrent
scrapes can share them freely. Gaps in the payload are handled here: some
become a "no_data" placeholder, some are skipped with a log line, and an
empty run-rate series raises NormalizationError (see each function).
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from catchpoint_exporter.collector.models import (
    AlertsResponse,
    ErrorDimension,
    ErrorsRawResponse,
    NodeRunRateResponse,
    NodeStatusResponse,
    NodeTestRunResponse,
    RunCountResponse,
    SLAPurgeItemsResponse,
    TimeValue,
)
from catchpoint_exporter.metrics import (
    DOWNTIME_PERCENTAGE,
    NO_DATA,
    NODE_STATUS,
    REQUEST_SLIPPAGE,
    RUN_RATE,
    SLA_PURGE_ITEMS_COUNT,
    TEST_ALERTS_CRITICAL,
    TEST_ALERTS_WARNING,
    TEST_ERROR_BY_IP,
    TEST_ERROR_BY_TYPE,
    TEST_ERROR_TOTAL_COUNT,
    TOTAL_TEST_RUNS_COUNT,
    UNIQUE_TEST_RUNS_COUNT,
    USAGE_PERCENTAGE,
    Observation,
)

log = logging.getLogger(__name__)

ERROR_TYPE_DIMENSION = "ErrorType"
HOST_IP_DIMENSION = "HostIP"

_ALERT_METRICS = {
    "Critical": TEST_ALERTS_CRITICAL,
    "Warning": TEST_ALERTS_WARNING,
}


class NormalizationError(ValueError):
    """The payload is missing something a metric can't be built without."""


def _node_labels(node_id: int, node_name: str) -> Dict[str, str]:
    return {"node_id": str(node_id), "node_name": node_name}


def normalize_node_status(node_id: int, response: NodeStatusResponse) -> List[Observation]:
    """1 for an active node, 0 otherwise.

    If the API has no record for the requested id we still report it, as
    node_name="no_data" with value 0, so every configured node shows up.
    """
    nodes = response.data.nodes if response.data else None
    if not nodes:
        return [Observation(NODE_STATUS, _node_labels(node_id, NO_DATA), 0.0)]

    observations = []
    for node in nodes:
        active = node.status is not None and node.status.name == "active"
        observations.append(
            Observation(NODE_STATUS, _node_labels(node.id, node.name), 1.0 if active else 0.0)
        )
    return observations


def normalize_sla_purge_items(response: SLAPurgeItemsResponse) -> List[Observation]:
    """Count SLA purge items per status name. Nothing to count -> no_data = 0."""
    counts: Dict[str, int] = defaultdict(int)
    items = response.data.sla_items if response.data else None
    for item in items or []:
        if item.status_type.name:
            counts[item.status_type.name] += 1

    if not counts:
        return [Observation(SLA_PURGE_ITEMS_COUNT, {"status_id": NO_DATA}, 0.0)]

    return [
        Observation(SLA_PURGE_ITEMS_COUNT, {"status_id": status}, float(count))
        for status, count in counts.items()
    ]


def split_dimension(dimension: ErrorDimension) -> Optional[Tuple[str, str]]:
    """Split "ErrorType:DNS" into ("ErrorType", "DNS") on the first colon.

    Returns None when there is no colon.
    """
    if ":" in dimension.name:
        kind, value = dimension.name.split(":", 1)
        return kind, value
    return None


def normalize_test_errors(response: ErrorsRawResponse) -> List[Observation]:
    """Total error count, plus error counts grouped by type and by host IP.

    The total sums every value. The group-bys use the first value of each
    summary item; items with no values only count toward the total, and
    dimensions other than ErrorType/HostIP are ignored.
    """
    total = 0.0
    by_type: Dict[str, float] = defaultdict(float)
    by_ip: Dict[str, float] = defaultdict(float)

    response_items = response.data.response_items if response.data else []
    for item in response_items:
        for summary in item.summary_items:
            total += sum(summary.values)
            if not summary.values:
                continue

            first_value = summary.values[0]
            for dimension in summary.dimensions:
                parts = split_dimension(dimension)
                if parts is None:
                    continue
                kind, value = parts
                if kind == ERROR_TYPE_DIMENSION:
                    by_type[value] += first_value
                elif kind == HOST_IP_DIMENSION:
                    by_ip[value] += first_value

    observations = [Observation(TEST_ERROR_TOTAL_COUNT, {}, total)]
    observations.extend(
        Observation(TEST_ERROR_BY_TYPE, {"error_type": error_type}, count)
        for error_type, count in by_type.items()
    )
    observations.extend(
        Observation(TEST_ERROR_BY_IP, {"ip": ip}, count)
        for ip, count in by_ip.items()
    )
    return observations


def normalize_alerts(response: AlertsResponse) -> List[Observation]:
    """One 1-valued observation per Critical or Warning alert.

    Alerts aren't counted up: two alerts for the same test and node give
    two observations with the same labels.
    """
    observations = []
    alerts = response.data.alerts if response.data else []
    for alert in alerts:
        metric = _ALERT_METRICS.get(alert.level.name)
        if metric is None:
            continue
        labels = {
            "test_id": str(alert.test.id),
            "test_name": alert.test.name,
            "node_id": str(alert.node.id),
            "node_name": alert.node.name,
        }
        observations.append(Observation(metric, labels, 1.0))
    return observations


def normalize_test_runs(node_id: int, response: NodeTestRunResponse) -> List[Observation]:
    if response.data is None:
        log.info("No test run data for node %s", node_id)
        return []

    observations = []
    for run in response.data.test_runs:
        labels = {
            "node_id": str(node_id),
            "test_name": run.test_name,
            "monitor_group": run.monitor_group.name,
        }
        observations.append(Observation(USAGE_PERCENTAGE, labels, run.usage_percentage))
        observations.append(Observation(DOWNTIME_PERCENTAGE, dict(labels), run.downtime_percentage))
    return observations


def _latest(samples: List[TimeValue], what: str, node_id: int) -> float:
    if not samples:
        raise NormalizationError(f"no {what} samples for node {node_id}")
    return samples[-1].value


def normalize_run_rate(response: NodeRunRateResponse) -> List[Observation]:
    """Latest request slippage and run rate for the node.

    Unlike the other endpoints there's no placeholder here: an empty series
    raises NormalizationError and the node gets neither metric.
    """
    if response.data is None:
        raise NormalizationError("run rate response has no data")

    node = response.data.node.node
    slippage = _latest(response.data.request_slippages, "request slippage", node.id)
    run_rate = _latest(response.data.run_rates, "run rate", node.id)

    labels = _node_labels(node.id, node.name)
    return [
        Observation(REQUEST_SLIPPAGE, labels, slippage),
        Observation(RUN_RATE, dict(labels), run_rate),
    ]


def normalize_test_run_count(response: RunCountResponse) -> List[Observation]:
    """Latest total and unique test run counts, from the first bucket of each.

    No "All Test Runs" data means nothing for the node; missing "Unique Test
    Runs" data only drops the unique count. Both cases are logged, neither
    gets a placeholder.
    """
    if response.data is None:
        log.info("Test run count response has no data")
        return []

    node = response.data.node
    all_runs = response.data.all_test_runs
    if not all_runs or not all_runs[0].data:
        log.info("No 'All Test Runs' data found for node %s", node.id)
        return []

    labels = _node_labels(node.id, node.name)
    observations = [Observation(TOTAL_TEST_RUNS_COUNT, labels, all_runs[0].data[-1].value)]

    unique_runs = response.data.unique_test_runs
    if unique_runs and unique_runs[0].data:
        observations.append(
            Observation(UNIQUE_TEST_RUNS_COUNT, dict(labels), unique_runs[0].data[-1].value)
        )
    else:
        log.info("No 'Unique Test Runs' data found for node %s", node.id)

    return observations
