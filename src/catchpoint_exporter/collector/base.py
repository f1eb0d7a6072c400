"""
Base interface for talking to Catchpoint.

The scrape cycle only ever sees this seven-method contract, so it doesn't
care whether payloads come from the live API, the offline mock, or a test
stub.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from catchpoint_exporter.collector.models import (
    AlertsResponse,
    ErrorsRawResponse,
    NodeRunRateResponse,
    NodeStatusResponse,
    NodeTestRunResponse,
    RunCountResponse,
    SLAPurgeItemsResponse,
)


class UpstreamError(Exception):
    """A Catchpoint call failed: transport error, non-2xx, or vendor errors.

    status_code is None when the request never got an HTTP response.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        messages: Sequence[str] = (),
    ):
        super().__init__(message)
        self.status_code = status_code
        self.messages: List[str] = list(messages)


class CatchpointAPI(ABC):
    """Interface for all Catchpoint data sources."""

    @abstractmethod
    def fetch_node_status(self, node_id: int) -> NodeStatusResponse:
        ...

    @abstractmethod
    def fetch_sla_purge_items(self) -> SLAPurgeItemsResponse:
        ...

    @abstractmethod
    def fetch_test_errors_raw(self) -> ErrorsRawResponse:
        ...

    @abstractmethod
    def fetch_alerts(self) -> AlertsResponse:
        ...

    @abstractmethod
    def fetch_node_test_runs(self, node_id: int) -> NodeTestRunResponse:
        ...

    @abstractmethod
    def fetch_node_run_rate(self, node_id: int) -> NodeRunRateResponse:
        ...

    @abstractmethod
    def fetch_node_test_run_count(self, node_id: int) -> RunCountResponse:
        ...

    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this source."""
        ...

    def close(self):
        pass
