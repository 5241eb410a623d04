"""Operator continuity API routes: portfolio, timeline, history and handoffs."""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from buildops.api.dependencies import get_current_principal
from buildops.api.schemas import (
    HistoryResponse,
    PortfolioBuildingResponse,
    PortfolioResponse,
    RecordedPeriodResponse,
    RecordPeriodPayload,
    TimelineResponse,
    TransitionPayload,
    TransitionResponse,
)
from buildops.services import get_db
from buildops.services.auth_service import Principal
from buildops.services.continuity_service import ContinuityQueryService
from buildops.services.transition_service import OperatorTransitionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["operators"])


@router.get("/portfolio/buildings", response_model=PortfolioResponse)
def get_portfolio(
    principal: Principal = Depends(get_current_principal),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
) -> PortfolioResponse:
    """
    List buildings visible to the caller with their current operator.

    Returns:
        200: {buildings, count}
    """
    entries = ContinuityQueryService(db).portfolio(principal)
    buildings = [PortfolioBuildingResponse.from_entry(entry) for entry in entries]
    logger.debug("Portfolio for user_id=%d: %d buildings", principal.user_id, len(buildings))
    return PortfolioResponse(buildings=buildings, count=len(buildings))


@router.get("/buildings/{building_id}/operator-timeline", response_model=TimelineResponse)
def get_operator_timeline(
    building_id: int,
    start_from: str | None = Query(None, alias="from"),
    start_to: str | None = Query(None, alias="to"),
    principal: Principal = Depends(get_current_principal),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
) -> TimelineResponse:
    """
    Operator periods of a building, each with counts scoped to that period.

    Query:
        from / to: optional ISO 8601 bounds on period start (inclusive)

    Returns:
        200: {building, timeline}
        400: Malformed bounds
        404: Building not found
    """
    timeline = ContinuityQueryService(db).timeline(building_id, start_from, start_to)
    return TimelineResponse.from_timeline(timeline)


@router.get("/buildings/{building_id}/history", response_model=HistoryResponse)
def get_building_history(
    building_id: int,
    principal: Principal = Depends(get_current_principal),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
) -> HistoryResponse:
    """Issues and work orders grouped by the operator period they belong to."""
    return HistoryResponse.from_history(ContinuityQueryService(db).history(building_id))


@router.post(
    "/buildings/{building_id}/transition",
    response_model=TransitionResponse,
    status_code=status.HTTP_201_CREATED,
)
def transition_operator(
    building_id: int,
    payload: TransitionPayload,
    principal: Principal = Depends(get_current_principal),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
) -> TransitionResponse:
    """
    Hand a building over to a new operator.

    Returns:
        201: {building, previousPeriod, nextPeriod, continuity}
        400: Invalid payload or effective date
        403: Caller may not change operators
        404: Building or target operator not found
        409: fromOperatorPeriodId is stale or missing
    """
    result = OperatorTransitionService(db).transition(
        building_id=building_id,
        from_operator_period_id=payload.from_operator_period_id,
        to_operator_type=payload.to_operator_type,
        to_operator_id=payload.to_operator_id,
        effective_date=payload.effective_date,
        handoff_notes=payload.handoff_notes,
        actor=principal,
    )
    return TransitionResponse.from_result(result)


@router.post(
    "/buildings/{building_id}/operator-periods",
    response_model=RecordedPeriodResponse,
    status_code=status.HTTP_201_CREATED,
)
def record_operator_period(
    building_id: int,
    payload: RecordPeriodPayload,
    principal: Principal = Depends(get_current_principal),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
) -> RecordedPeriodResponse:
    """
    Record an initial, planned or historical operator period.

    Returns:
        201: {building, period}
        409: ACTIVE requested while the building already has an operator
    """
    result = OperatorTransitionService(db).record_period(
        building_id=building_id,
        operator_type=payload.operator_type,
        operator_id=payload.operator_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        status=payload.status,
        handoff_notes=payload.handoff_notes,
        actor=principal,
    )
    return RecordedPeriodResponse.from_result(result)
