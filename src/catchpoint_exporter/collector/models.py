"""
Response shapes for the Catchpoint v2 REST API.

Only the fields the exporter reads (plus the common envelope) are declared;
everything else in the payload is ignored. Every endpoint wraps its payload
in the same envelope: data, messages, errors, completed, traceId, usageLimits.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def null_is_default(cls, data: Any) -> Any:
        # The API sends null for empty nested records and lists; treat it
        # like an absent key so one gap doesn't reject the whole payload
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class IDNamePair(ApiModel):
    id: int = 0
    name: str = ""


class ApiMessage(ApiModel):
    information: str = ""


class ApiError(ApiModel):
    id: Optional[str] = None
    message: str = ""


class Envelope(ApiModel, Generic[T]):
    """The wrapper every Catchpoint endpoint returns."""

    data: Optional[T] = None
    messages: Optional[List[ApiMessage]] = None
    errors: Optional[List[ApiError]] = None
    completed: bool = False
    trace_id: Optional[str] = Field(default=None, alias="traceId")
    # Shape differs between endpoints, and nothing here reads it
    usage_limits: Optional[Dict[str, Any]] = Field(default=None, alias="usageLimits")


# -- /nodes/status/{id} --

class NodeRecord(ApiModel):
    id: int
    name: str = ""
    status: Optional[IDNamePair] = None


class NodeStatusData(ApiModel):
    nodes: Optional[List[NodeRecord]] = None
    has_more: bool = Field(default=False, alias="hasMore")


# -- /slapurgeitems --

class SLAItem(ApiModel):
    id: int = 0
    name: str = ""
    reason: str = ""
    status_type: IDNamePair = Field(default_factory=IDNamePair, alias="statusType")
    interval_start: Optional[datetime] = Field(default=None, alias="intervalStart")
    interval_end: Optional[datetime] = Field(default=None, alias="intervalEnd")


class SLAPurgeItemsData(ApiModel):
    sla_items: Optional[List[SLAItem]] = Field(default=None, alias="slaItems")
    has_more: bool = Field(default=False, alias="hasMore")


# -- /tests/errors/raw --

class ErrorDimension(ApiModel):
    id: int = 0
    name: str = ""


class ErrorSummaryItem(ApiModel):
    values: List[float] = Field(default_factory=list)
    dimensions: List[ErrorDimension] = Field(default_factory=list)


class ErrorResponseItem(ApiModel):
    start_time_utc: Optional[str] = Field(default=None, alias="startTimeUtc")
    end_time_utc: Optional[str] = Field(default=None, alias="endTimeUtc")
    summary_items: List[ErrorSummaryItem] = Field(default_factory=list, alias="summaryItems")


class ErrorsRawData(ApiModel):
    response_items: List[ErrorResponseItem] = Field(default_factory=list, alias="responseItems")


# -- /tests/alerts --

class Alert(ApiModel):
    id: Optional[str] = None
    report_time: Optional[datetime] = Field(default=None, alias="reportTime")
    level: IDNamePair = Field(default_factory=IDNamePair)
    test: IDNamePair = Field(default_factory=IDNamePair)
    node: IDNamePair = Field(default_factory=IDNamePair)


class AlertsData(ApiModel):
    alerts: List[Alert] = Field(default_factory=list)
    has_more: bool = Field(default=False, alias="hasMore")


# -- /nodes/testrun/{id} --

class NodeTestRun(ApiModel):
    test_id: int = Field(default=0, alias="testId")
    test_name: str = Field(default="", alias="testName")
    division_name: str = Field(default="", alias="divisionName")
    runs: int = 0
    usage_percentage: float = Field(default=0.0, alias="usagePercentage")
    downtime_percentage: float = Field(default=0.0, alias="downTimePercentage")
    monitor_group: IDNamePair = Field(default_factory=IDNamePair, alias="monitorGroup")


class NodeTestRunData(ApiModel):
    test_runs: List[NodeTestRun] = Field(default_factory=list, alias="testRuns")
    total_tests: int = Field(default=0, alias="totalTests")
    has_more: bool = Field(default=False, alias="hasMore")


# -- /nodes/runrate/{id} and /nodes/testruncount/{id} --

class TimeValue(ApiModel):
    report_time: Optional[datetime] = Field(default=None, alias="reportTime")
    value: float = 0.0


class NodeInfo(ApiModel):
    id: int = 0
    name: str = ""
    status: Optional[IDNamePair] = None
    is_paused: bool = Field(default=False, alias="isPaused")


class NodeDetails(ApiModel):
    node: NodeInfo = Field(default_factory=NodeInfo)


class NodeRunRateData(ApiModel):
    node: NodeDetails = Field(default_factory=NodeDetails)
    request_slippages: List[TimeValue] = Field(default_factory=list, alias="requestSlippages")
    run_rates: List[TimeValue] = Field(default_factory=list, alias="runRates")


class MonitorData(ApiModel):
    monitor_set_type: IDNamePair = Field(default_factory=IDNamePair, alias="monitorSetType")
    data: List[TimeValue] = Field(default_factory=list)


class RunCountData(ApiModel):
    node: NodeInfo = Field(default_factory=NodeInfo)
    all_test_runs: List[MonitorData] = Field(default_factory=list, alias="allTestRuns")
    unique_test_runs: List[MonitorData] = Field(default_factory=list, alias="uniqueTestRuns")


NodeStatusResponse = Envelope[NodeStatusData]
SLAPurgeItemsResponse = Envelope[SLAPurgeItemsData]
ErrorsRawResponse = Envelope[ErrorsRawData]
AlertsResponse = Envelope[AlertsData]
NodeTestRunResponse = Envelope[NodeTestRunData]
NodeRunRateResponse = Envelope[NodeRunRateData]
RunCountResponse = Envelope[RunCountData]
