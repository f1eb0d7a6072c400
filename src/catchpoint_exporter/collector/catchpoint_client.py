"""
Client for the live Catchpoint v2 REST API.

Every call is a bearer-authenticated GET that returns the standard JSON
envelope. Anything that isn't a clean 2xx with an empty error list comes
back as an UpstreamError, so callers only have one exception to handle.
"""

from __future__ import annotations

import logging
from typing import List, Type, TypeVar

import httpx
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
from catchpoint_exporter.config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS

log = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)


def _error_messages(response: httpx.Response) -> List[str]:
    """Pull the vendor's error messages out of a failed response, if any."""
    try:
        body = response.json()
    except ValueError:
        return []
    if not isinstance(body, dict):
        return []
    errors = body.get("errors")
    if not isinstance(errors, list):
        return []
    return [
        e["message"] for e in errors
        if isinstance(e, dict) and isinstance(e.get("message"), str)
    ]


class CatchpointClient(CatchpointAPI):

    def __init__(
        self,
        bearer_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=timeout_seconds,
            headers={
                "Authorization": f"Bearer {bearer_token}",
                "Accept": "application/json",
            },
        )

    def _get(self, path: str, model: Type[R]) -> R:
        try:
            response = self._client.get(path)
        except httpx.HTTPError as e:
            raise UpstreamError(f"GET {path} failed: {e}") from e

        if not response.is_success:
            messages = _error_messages(response)
            if messages:
                detail = ", ".join(messages)
            else:
                detail = "could not parse error body"
            raise UpstreamError(
                f"API request failed with status {response.status_code}: {detail}",
                status_code=response.status_code,
                messages=messages,
            )

        try:
            parsed = model.model_validate_json(response.content)
        except ValidationError as e:
            raise UpstreamError(
                f"GET {path} returned an unexpected payload: {e}",
                status_code=response.status_code,
            ) from e

        if parsed.errors:
            messages = [err.message for err in parsed.errors]
            raise UpstreamError(
                f"API reported errors: {', '.join(messages)}",
                status_code=response.status_code,
                messages=messages,
            )

        log.debug("GET %s -> %d (trace %s)", path, response.status_code, parsed.trace_id)
        return parsed

    def fetch_node_status(self, node_id: int) -> NodeStatusResponse:
        return self._get(f"/nodes/status/{node_id}", NodeStatusResponse)

    def fetch_sla_purge_items(self) -> SLAPurgeItemsResponse:
        return self._get("/slapurgeitems", SLAPurgeItemsResponse)

    def fetch_test_errors_raw(self) -> ErrorsRawResponse:
        return self._get("/tests/errors/raw", ErrorsRawResponse)

    def fetch_alerts(self) -> AlertsResponse:
        return self._get("/tests/alerts", AlertsResponse)

    def fetch_node_test_runs(self, node_id: int) -> NodeTestRunResponse:
        return self._get(f"/nodes/testrun/{node_id}", NodeTestRunResponse)

    def fetch_node_run_rate(self, node_id: int) -> NodeRunRateResponse:
        return self._get(f"/nodes/runrate/{node_id}", NodeRunRateResponse)

    def fetch_node_test_run_count(self, node_id: int) -> RunCountResponse:
        return self._get(f"/nodes/testruncount/{node_id}", RunCountResponse)

    def name(self) -> str:
        return f"Catchpoint ({self._base_url})"

    def close(self):
        self._client.close()
