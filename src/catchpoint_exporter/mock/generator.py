"""
Mock Catchpoint API payload generator.

Produces fake but plausible JSON envelopes for the seven endpoints the
exporter reads, so we can develop and demo without a Catchpoint account.
Seeded, so two generators with the same seed return the same data.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

ERROR_TYPES = ["DNS", "Connection", "SSL", "NoResponse", "Timeout"]
HOST_IPS = ["192.0.2.1", "192.0.2.2", "198.51.100.1", "203.0.113.1"]
SLA_STATUSES = ["Active", "Pending", "Purged"]
ALERT_LEVELS = ["Critical", "Warning", "Improved", "Info"]
MONITOR_GROUPS = ["Browser", "API", "DNS", "Ping"]
TEST_NAMES = ["Homepage", "Checkout API", "Login flow", "CDN edge", "Search"]

# How many samples each run-rate / test-run-count series carries
SERIES_LENGTH = 6


def envelope(data: Any, errors: List[Dict[str, str]] | None = None) -> Dict[str, Any]:
    return {
        "data": data,
        "messages": [],
        "errors": errors or [],
        "completed": not errors,
        "traceId": "mock-trace",
        "usageLimits": None,
    }


class MockCatchpointAPI:

    def __init__(self, seed: int = 42, node_count: int = 3):
        self._rng = random.Random(seed)
        self._node_count = node_count
        self._now = datetime(2024, 4, 11, 0, 0, tzinfo=timezone.utc)

    def _node_name(self, node_id: int) -> str:
        return f"Node {node_id}"

    def _series(self, low: float, high: float) -> List[Dict[str, Any]]:
        start = self._now - timedelta(minutes=5 * SERIES_LENGTH)
        return [
            {
                "reportTime": (start + timedelta(minutes=5 * i)).isoformat(),
                "value": round(self._rng.uniform(low, high)),
            }
            for i in range(SERIES_LENGTH)
        ]

    def node_status(self, node_id: int) -> Dict[str, Any]:
        # Ids beyond node_count don't exist upstream
        if node_id > self._node_count or node_id < 1:
            return envelope({"nodes": [], "hasMore": False})
        status = "active" if self._rng.random() > 0.2 else "inactive"
        return envelope({
            "nodes": [{
                "id": node_id,
                "name": self._node_name(node_id),
                "status": {"id": 0 if status == "active" else 1, "name": status},
            }],
            "hasMore": False,
        })

    def sla_purge_items(self) -> Dict[str, Any]:
        items = []
        for i in range(self._rng.randint(0, 6)):
            status = self._rng.choice(SLA_STATUSES)
            items.append({
                "id": i + 1,
                "name": f"Purge {i + 1}",
                "reason": "Maintenance window",
                "statusType": {"id": SLA_STATUSES.index(status), "name": status},
            })
        return envelope({"slaItems": items, "hasMore": False})

    def test_errors_raw(self) -> Dict[str, Any]:
        summary_items = []
        for i, error_type in enumerate(ERROR_TYPES):
            summary_items.append({
                "values": [self._rng.randint(0, 12)],
                "dimensions": [
                    {"id": i + 1, "name": f"ErrorType:{error_type}"},
                    {"id": 100 + i, "name": f"HostIP:{self._rng.choice(HOST_IPS)}"},
                ],
            })
        return envelope({
            "responseItems": [{
                "startTimeUtc": (self._now - timedelta(hours=3)).isoformat(),
                "endTimeUtc": self._now.isoformat(),
                "summaryItems": summary_items,
            }],
        })

    def alerts(self) -> Dict[str, Any]:
        alerts = []
        for i in range(self._rng.randint(0, 5)):
            node_id = self._rng.randint(1, self._node_count)
            test_id = self._rng.randrange(len(TEST_NAMES))
            level = self._rng.choice(ALERT_LEVELS)
            alerts.append({
                "id": str(i + 1),
                "reportTime": self._now.isoformat(),
                "level": {"id": ALERT_LEVELS.index(level), "name": level},
                "test": {"id": test_id + 1, "name": TEST_NAMES[test_id]},
                "node": {"id": node_id, "name": self._node_name(node_id)},
            })
        return envelope({"alerts": alerts, "hasMore": False})

    def node_test_runs(self, node_id: int) -> Dict[str, Any]:
        runs = []
        for test_id, test_name in enumerate(TEST_NAMES[: self._rng.randint(1, len(TEST_NAMES))]):
            downtime = round(self._rng.uniform(0, 10), 2)
            runs.append({
                "testId": test_id + 1,
                "testName": test_name,
                "divisionName": "Main",
                "runs": self._rng.randint(100, 2000),
                "usagePercentage": round(self._rng.uniform(5, 95), 2),
                "downTimePercentage": downtime,
                "monitorGroup": {"id": test_id, "name": MONITOR_GROUPS[test_id % len(MONITOR_GROUPS)]},
            })
        return envelope({"node": {}, "testRuns": runs, "totalTests": len(runs), "hasMore": False})

    def node_run_rate(self, node_id: int) -> Dict[str, Any]:
        return envelope({
            "node": {"node": {"id": node_id, "name": self._node_name(node_id)}},
            "requestSlippages": self._series(0, 250),
            "runRates": self._series(80, 100),
            "hasMore": False,
        })

    def node_test_run_count(self, node_id: int) -> Dict[str, Any]:
        return envelope({
            "node": {"id": node_id, "name": self._node_name(node_id)},
            "allTestRuns": [
                {"monitorSetType": {"id": 1, "name": "Browser"}, "data": self._series(500, 1500)},
            ],
            "uniqueTestRuns": [
                {"monitorSetType": {"id": 1, "name": "Browser"}, "data": self._series(20, 80)},
            ],
            "hasMore": False,
        })
