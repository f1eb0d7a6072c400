"""
Metric definitions for the Catchpoint exporter.

Every scrape boils down to a flat list of Observations. The METRICS table
below is the fixed set of gauge families the exporter can produce, with the
label schema each one carries. It's built once at import and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Tuple


NODE_STATUS = "catchpoint_node_status"
SLA_PURGE_ITEMS_COUNT = "catchpoint_sla_purge_items_count"
TEST_ERROR_TOTAL_COUNT = "catchpoint_test_error_total_count"
TEST_ERROR_BY_TYPE = "catchpoint_test_error_by_type_count"
TEST_ERROR_BY_IP = "catchpoint_test_error_by_ip_count"
TEST_ALERTS_CRITICAL = "catchpoint_test_alerts_critical_count"
TEST_ALERTS_WARNING = "catchpoint_test_alerts_warning_count"
USAGE_PERCENTAGE = "catchpoint_usage_percentage"
DOWNTIME_PERCENTAGE = "catchpoint_downtime_percentage"
REQUEST_SLIPPAGE = "catchpoint_node_request_slippage"
RUN_RATE = "catchpoint_node_run_rate"
TOTAL_TEST_RUNS_COUNT = "catchpoint_total_test_runs_count"
UNIQUE_TEST_RUNS_COUNT = "catchpoint_unique_test_runs_count"
UP = "catchpoint_up"

NODE_LABELS = ("node_id", "node_name")
TEST_LABELS = ("test_id", "test_name", "node_id", "node_name")
TEST_RUN_LABELS = ("node_id", "test_name", "monitor_group")
STATUS_LABELS = ("status_id",)
ERROR_TYPE_LABELS = ("error_type",)
IP_ADDRESS_LABELS = ("ip",)

# Placeholder label value for nodes / SLA statuses the API had nothing for
NO_DATA = "no_data"


@dataclass(frozen=True)
class MetricSpec:
    name: str
    help_text: str
    labels: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Observation:
    """One gauge sample: metric name, label set, value."""

    name: str
    labels: Dict[str, str] = field(default_factory=dict)
    value: float = 0.0

    def label_values(self, spec: MetricSpec) -> Tuple[str, ...]:
        """Label values ordered the way the metric family declares them."""
        return tuple(self.labels[label] for label in spec.labels)


METRICS: Tuple[MetricSpec, ...] = (
    MetricSpec(
        NODE_STATUS,
        "The operational status of a Catchpoint node (1 for active, 0 for inactive).",
        NODE_LABELS,
    ),
    MetricSpec(SLA_PURGE_ITEMS_COUNT, "Count of SLA purge items by status.", STATUS_LABELS),
    MetricSpec(TEST_ERROR_TOTAL_COUNT, "The total count of all test errors."),
    MetricSpec(TEST_ERROR_BY_TYPE, "Count of errors segmented by error type.", ERROR_TYPE_LABELS),
    MetricSpec(TEST_ERROR_BY_IP, "Error counts traced back to specific IP addresses.", IP_ADDRESS_LABELS),
    MetricSpec(TEST_ALERTS_CRITICAL, "Total number of critical alerts by test.", TEST_LABELS),
    MetricSpec(TEST_ALERTS_WARNING, "Total number of warning alerts by test.", TEST_LABELS),
    MetricSpec(USAGE_PERCENTAGE, "Usage percentage of test runs on a node", TEST_RUN_LABELS),
    MetricSpec(DOWNTIME_PERCENTAGE, "Downtime percentage of test runs on a node", TEST_RUN_LABELS),
    MetricSpec(
        REQUEST_SLIPPAGE,
        "The slippage in test requests timings on a node, showing delays in scheduled test executions",
        NODE_LABELS,
    ),
    MetricSpec(
        RUN_RATE,
        "The rate of which test runs are successfully completed on a node",
        NODE_LABELS,
    ),
    MetricSpec(TOTAL_TEST_RUNS_COUNT, "The total number of test runs on a node", NODE_LABELS),
    MetricSpec(UNIQUE_TEST_RUNS_COUNT, "The number of unique test runs on a node", NODE_LABELS),
    MetricSpec(
        UP,
        "Indicates whether the last scrape of metrics from Catchpoint was successful.",
    ),
)

METRICS_BY_NAME: Mapping[str, MetricSpec] = MappingProxyType({spec.name: spec for spec in METRICS})
