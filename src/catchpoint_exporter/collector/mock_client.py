"""
Catchpoint source backed by the mock payload generator.
Used for local development without an API token.
"""

from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel, ValidationError

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
from catchpoint_exporter.mock.generator import MockCatchpointAPI

R = TypeVar("R", bound=BaseModel)


def _parse(payload: Dict[str, Any], model: Type[R]) -> R:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise UpstreamError(f"mock returned an unexpected payload: {e}") from e


class MockCatchpointClient(CatchpointAPI):
    """Wraps the mock generator as a standard Catchpoint source."""

    def __init__(self, seed: int = 42, node_count: int = 3):
        self._api = MockCatchpointAPI(seed=seed, node_count=node_count)

    def fetch_node_status(self, node_id: int) -> NodeStatusResponse:
        return _parse(self._api.node_status(node_id), NodeStatusResponse)

    def fetch_sla_purge_items(self) -> SLAPurgeItemsResponse:
        return _parse(self._api.sla_purge_items(), SLAPurgeItemsResponse)

    def fetch_test_errors_raw(self) -> ErrorsRawResponse:
        return _parse(self._api.test_errors_raw(), ErrorsRawResponse)

    def fetch_alerts(self) -> AlertsResponse:
        return _parse(self._api.alerts(), AlertsResponse)

    def fetch_node_test_runs(self, node_id: int) -> NodeTestRunResponse:
        return _parse(self._api.node_test_runs(node_id), NodeTestRunResponse)

    def fetch_node_run_rate(self, node_id: int) -> NodeRunRateResponse:
        return _parse(self._api.node_run_rate(node_id), NodeRunRateResponse)

    def fetch_node_test_run_count(self, node_id: int) -> RunCountResponse:
        return _parse(self._api.node_test_run_count(node_id), RunCountResponse)

    def name(self) -> str:
        return "Mock Catchpoint (simulated nodes)"
