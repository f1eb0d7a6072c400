"""
One scrape of the Catchpoint API.

A ScrapeCycle is built fresh for every Prometheus scrape and thrown away
afterwards, so two overlapping scrapes never share any accumulated state.
Each upstream call is isolated: a failed fetch (or a payload we can't
normalize) is logged and skipped, and the rest of the cycle carries on.

Call order is fixed: node status for every node, SLA purge items, test
errors, alerts, then per node test runs / run rate / test run count.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, TypeVar

from catchpoint_exporter.collector.base import CatchpointAPI, UpstreamError
from catchpoint_exporter.collector.normalizers import (
    NormalizationError,
    normalize_alerts,
    normalize_node_status,
    normalize_run_rate,
    normalize_sla_purge_items,
    normalize_test_errors,
    normalize_test_run_count,
    normalize_test_runs,
)
from catchpoint_exporter.config import Config
from catchpoint_exporter.metrics import UP, Observation

log = logging.getLogger(__name__)

P = TypeVar("P")


class ScrapeCycle:

    def __init__(self, api: Optional[CatchpointAPI], config: Optional[Config]):
        self._api = api
        self._config = config
        self._observations: List[Observation] = []

    def run(self) -> List[Observation]:
        """Fetch everything once and return the observations.

        Returns an empty list, without touching the API, when there's no
        config or no API client to work with.
        """
        if self._config is None or self._api is None:
            log.error("Collector config or client is missing, skipping scrape")
            return []

        log.debug("Starting collection for %d node(s)", len(self._config.node_ids))

        # "up" tracks whether the cycle itself completed, not upstream health
        up = 1.0

        for node_id in self._config.node_ids:
            self._step(
                "node status",
                lambda: self._api.fetch_node_status(node_id),
                lambda r: normalize_node_status(node_id, r),
                node_id,
            )

        self._step("SLA purge items", self._api.fetch_sla_purge_items, normalize_sla_purge_items)
        self._step("test errors", self._api.fetch_test_errors_raw, normalize_test_errors)
        self._step("test alerts", self._api.fetch_alerts, normalize_alerts)

        for node_id in self._config.node_ids:
            self._step(
                "node test runs",
                lambda: self._api.fetch_node_test_runs(node_id),
                lambda r: normalize_test_runs(node_id, r),
                node_id,
            )
            self._step(
                "node run rate",
                lambda: self._api.fetch_node_run_rate(node_id),
                normalize_run_rate,
                node_id,
            )
            self._step(
                "test run count",
                lambda: self._api.fetch_node_test_run_count(node_id),
                normalize_test_run_count,
                node_id,
            )

        self._observations.append(Observation(UP, {}, up))
        log.debug("Collection finished: %d observation(s)", len(self._observations))
        return self._observations

    def _step(
        self,
        resource: str,
        fetch: Callable[[], P],
        normalize: Callable[[P], List[Observation]],
        node_id: Optional[int] = None,
    ):
        self._config.rate_limiter.wait()

        try:
            response = fetch()
        except UpstreamError as e:
            if node_id is None:
                log.warning("Failed to fetch %s: %s", resource, e)
            else:
                log.warning("Failed to fetch %s for node %s: %s", resource, node_id, e)
            return

        try:
            observations = normalize(response)
        except NormalizationError as e:
            log.warning("Skipping %s: %s", resource, e)
            return

        self._observations.extend(observations)
