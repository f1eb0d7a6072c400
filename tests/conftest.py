"""Shared fixtures."""

import pytest

from catchpoint_exporter.config import Config, RateLimiter
from tests.payloads import StubCatchpointAPI


@pytest.fixture
def config() -> Config:
    return Config(bearer_token="testToken", node_ids=(1,), rate_limiter=RateLimiter(0))


@pytest.fixture
def stub_api() -> StubCatchpointAPI:
    return StubCatchpointAPI()
