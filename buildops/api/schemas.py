"""Pydantic request/response schemas for the HTTP API.

JSON field names are camelCase; request bodies also accept snake_case.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from buildops.models.issue import Issue, IssueCategory, IssuePriority, IssueStatus
from buildops.models.operator_period import OperatorPeriod, OperatorPeriodStatus, OperatorType
from buildops.models.work_order import WorkOrder, WorkOrderPriority, WorkOrderStatus
from buildops.services.continuity_service import (
    BuildingHistory,
    BuildingTimeline,
    PortfolioBuilding,
)
from buildops.services.transition_service import (
    MAX_HANDOFF_NOTES_LENGTH,
    RecordedPeriod,
    TransitionResult,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class TransitionPayload(CamelModel):
    """Request payload for POST /api/buildings/{id}/transition."""

    from_operator_period_id: int | None = Field(
        None, description="Period the caller believes is ACTIVE (required unless none is)"
    )
    to_operator_type: OperatorType = Field(..., description="PM or HOA")
    to_operator_id: int = Field(..., description="Management company or HOA organization id")
    effective_date: str = Field(..., description="ISO 8601 instant of the handoff")
    handoff_notes: str | None = Field(None, max_length=MAX_HANDOFF_NOTES_LENGTH)


class RecordPeriodPayload(CamelModel):
    """Request payload for POST /api/buildings/{id}/operator-periods."""

    operator_type: OperatorType
    operator_id: int
    start_date: str
    end_date: str | None = None
    status: OperatorPeriodStatus = OperatorPeriodStatus.ACTIVE
    handoff_notes: str | None = Field(None, max_length=MAX_HANDOFF_NOTES_LENGTH)


class CreateIssuePayload(CamelModel):
    building_id: int
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: IssueCategory
    priority: IssuePriority = IssuePriority.MEDIUM
    unit_id: int | None = None
    location: str | None = Field(None, max_length=200)


class CreateWorkOrderPayload(CamelModel):
    building_id: int
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    issue_id: int | None = None
    unit_id: int | None = None
    assigned_to_id: int | None = None
    priority: WorkOrderPriority = WorkOrderPriority.MEDIUM
    scheduled_date: str | None = None
    estimated_cost: Decimal | None = Field(None, ge=0)
    notes: str | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class BuildingSummary(CamelModel):
    id: int
    name: str
    address: str
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    total_units: int
    current_operator_period_id: int | None = None


class OperatorPeriodResponse(CamelModel):
    """One operator period with its operator organization resolved."""

    id: int
    building_id: int
    operator_type: OperatorType
    operator_id: int
    operator_name: str | None = None
    status: OperatorPeriodStatus
    start_date: datetime
    end_date: datetime | None = None
    handoff_notes: str | None = None
    created_at: datetime

    @classmethod
    def from_period(cls, period: OperatorPeriod) -> "OperatorPeriodResponse":
        organization = period.operator_organization
        return cls(
            id=period.id,
            building_id=period.building_id,
            operator_type=period.operator_type,
            operator_id=period.operator.organization_id,
            operator_name=organization.name if organization is not None else None,
            status=period.status,
            start_date=period.start_date,
            end_date=period.end_date,
            handoff_notes=period.handoff_notes,
            created_at=period.created_at,
        )


class ContinuityCountersResponse(CamelModel):
    issues_in_building_history: int
    work_orders_in_building_history: int


class TransitionResponse(CamelModel):
    building: BuildingSummary
    previous_period: OperatorPeriodResponse | None = None
    next_period: OperatorPeriodResponse
    continuity: ContinuityCountersResponse

    @classmethod
    def from_result(cls, result: TransitionResult) -> "TransitionResponse":
        return cls(
            building=BuildingSummary.model_validate(result.building),
            previous_period=(
                OperatorPeriodResponse.from_period(result.previous_period)
                if result.previous_period is not None
                else None
            ),
            next_period=OperatorPeriodResponse.from_period(result.next_period),
            continuity=ContinuityCountersResponse.model_validate(result.continuity),
        )


class RecordedPeriodResponse(CamelModel):
    building: BuildingSummary
    period: OperatorPeriodResponse

    @classmethod
    def from_result(cls, result: RecordedPeriod) -> "RecordedPeriodResponse":
        return cls(
            building=BuildingSummary.model_validate(result.building),
            period=OperatorPeriodResponse.from_period(result.period),
        )


class PortfolioBuildingResponse(BuildingSummary):
    current_period: OperatorPeriodResponse | None = None
    issue_count: int
    work_order_count: int
    unit_count: int

    @classmethod
    def from_entry(cls, entry: PortfolioBuilding) -> "PortfolioBuildingResponse":
        summary = BuildingSummary.model_validate(entry.building)
        return cls(
            **summary.model_dump(),
            current_period=(
                OperatorPeriodResponse.from_period(entry.current_period)
                if entry.current_period is not None
                else None
            ),
            issue_count=entry.issue_count,
            work_order_count=entry.work_order_count,
            unit_count=entry.unit_count,
        )


class PortfolioResponse(CamelModel):
    buildings: list[PortfolioBuildingResponse]
    count: int


class TimelinePeriodResponse(OperatorPeriodResponse):
    issue_count: int
    work_order_count: int


class TimelineResponse(CamelModel):
    building: BuildingSummary
    timeline: list[TimelinePeriodResponse]

    @classmethod
    def from_timeline(cls, result: BuildingTimeline) -> "TimelineResponse":
        return cls(
            building=BuildingSummary.model_validate(result.building),
            timeline=[
                TimelinePeriodResponse(
                    **OperatorPeriodResponse.from_period(entry.period).model_dump(),
                    issue_count=entry.issue_count,
                    work_order_count=entry.work_order_count,
                )
                for entry in result.timeline
            ],
        )


class IssueResponse(CamelModel):
    id: int
    title: str
    description: str
    category: IssueCategory
    priority: IssuePriority
    status: IssueStatus
    location: str | None = None
    building_id: int
    unit_id: int | None = None
    submitted_by_id: int | None = None
    operator_period_id: int | None = None
    created_at: datetime
    completed_date: datetime | None = None


class WorkOrderResponse(CamelModel):
    id: int
    title: str
    description: str
    priority: WorkOrderPriority
    status: WorkOrderStatus
    issue_id: int | None = None
    building_id: int
    unit_id: int | None = None
    assigned_to_id: int | None = None
    operator_period_id: int | None = None
    scheduled_date: datetime | None = None
    estimated_cost: Decimal | None = None
    notes: str | None = None
    created_at: datetime
    completed_date: datetime | None = None


class HistoryRecord(CamelModel):
    """Compact view of an issue or work order inside the history listing."""

    id: int
    title: str
    status: str
    priority: str
    created_at: datetime
    completed_date: datetime | None = None

    @classmethod
    def from_record(cls, record: Issue | WorkOrder) -> "HistoryRecord":
        return cls(
            id=record.id,
            title=record.title,
            status=record.status.value,
            priority=record.priority.value,
            created_at=record.created_at,
            completed_date=record.completed_date,
        )


class HistoryPeriodResponse(CamelModel):
    period: OperatorPeriodResponse
    issue_count: int
    work_order_count: int
    issues: list[HistoryRecord]
    work_orders: list[HistoryRecord]


class UnassignedHistory(CamelModel):
    issue_count: int
    work_order_count: int
    issues: list[HistoryRecord]
    work_orders: list[HistoryRecord]


class HistoryResponse(CamelModel):
    building: BuildingSummary
    periods: list[HistoryPeriodResponse]
    unassigned: UnassignedHistory

    @classmethod
    def from_history(cls, result: BuildingHistory) -> "HistoryResponse":
        return cls(
            building=BuildingSummary.model_validate(result.building),
            periods=[
                HistoryPeriodResponse(
                    period=OperatorPeriodResponse.from_period(entry.period),
                    issue_count=len(entry.issues),
                    work_order_count=len(entry.work_orders),
                    issues=[HistoryRecord.from_record(i) for i in entry.issues],
                    work_orders=[HistoryRecord.from_record(w) for w in entry.work_orders],
                )
                for entry in result.periods
            ],
            unassigned=UnassignedHistory(
                issue_count=len(result.unassigned_issues),
                work_order_count=len(result.unassigned_work_orders),
                issues=[HistoryRecord.from_record(i) for i in result.unassigned_issues],
                work_orders=[HistoryRecord.from_record(w) for w in result.unassigned_work_orders],
            ),
        )


__all__ = [
    "TransitionPayload",
    "RecordPeriodPayload",
    "CreateIssuePayload",
    "CreateWorkOrderPayload",
    "BuildingSummary",
    "OperatorPeriodResponse",
    "TransitionResponse",
    "RecordedPeriodResponse",
    "PortfolioBuildingResponse",
    "PortfolioResponse",
    "TimelinePeriodResponse",
    "TimelineResponse",
    "IssueResponse",
    "WorkOrderResponse",
    "HistoryResponse",
]
