"""Issue and work-order API routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from buildops.api.dependencies import get_current_principal
from buildops.api.schemas import (
    CreateIssuePayload,
    CreateWorkOrderPayload,
    IssueResponse,
    WorkOrderResponse,
)
from buildops.services import get_db
from buildops.services.auth_service import Principal
from buildops.services.issue_service import IssueService, WorkOrderService

router = APIRouter(prefix="/api", tags=["issues"])


@router.post("/issues", response_model=IssueResponse, status_code=status.HTTP_201_CREATED)
def create_issue(
    payload: CreateIssuePayload,
    principal: Principal = Depends(get_current_principal),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
) -> IssueResponse:
    """
    Report an issue; it is attributed to the building's current operator period.

    Returns:
        201: Created issue with operatorPeriodId (null if the building has no operator)
        404: Building or unit not found
    """
    issue = IssueService(db).create_issue(
        principal,
        building_id=payload.building_id,
        title=payload.title,
        description=payload.description,
        category=payload.category,
        priority=payload.priority,
        unit_id=payload.unit_id,
        location=payload.location,
    )
    return IssueResponse.model_validate(issue)


@router.get("/issues/{issue_id}", response_model=IssueResponse)
def get_issue(
    issue_id: int,
    principal: Principal = Depends(get_current_principal),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
) -> IssueResponse:
    return IssueResponse.model_validate(IssueService(db).get_issue(issue_id))


@router.post(
    "/work-orders", response_model=WorkOrderResponse, status_code=status.HTTP_201_CREATED
)
def create_work_order(
    payload: CreateWorkOrderPayload,
    principal: Principal = Depends(get_current_principal),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
) -> WorkOrderResponse:
    """
    Create a work order; it inherits the linked issue's operator period.

    Returns:
        201: Created work order
        403: Caller may not dispatch work orders
        404: Building, unit, issue or assignee not found
    """
    work_order = WorkOrderService(db).create_work_order(
        principal,
        building_id=payload.building_id,
        title=payload.title,
        description=payload.description,
        issue_id=payload.issue_id,
        unit_id=payload.unit_id,
        assigned_to_id=payload.assigned_to_id,
        priority=payload.priority,
        scheduled_date=payload.scheduled_date,
        estimated_cost=payload.estimated_cost,
        notes=payload.notes,
    )
    return WorkOrderResponse.model_validate(work_order)


@router.get("/work-orders/{work_order_id}", response_model=WorkOrderResponse)
def get_work_order(
    work_order_id: int,
    principal: Principal = Depends(get_current_principal),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
) -> WorkOrderResponse:
    return WorkOrderResponse.model_validate(WorkOrderService(db).get_work_order(work_order_id))
