"""Issue and work-order creation with operator-period attribution."""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from buildops.models.building import Building, Unit
from buildops.models.issue import Issue, IssueCategory, IssuePriority, IssueStatus
from buildops.models.user import User, UserRole
from buildops.models.work_order import WorkOrder, WorkOrderPriority, WorkOrderStatus
from buildops.services.attribution_service import AttributionBinder
from buildops.services.auth_service import WRITE_ROLES, Principal, require_role
from buildops.services.dates import parse_instant
from buildops.services.errors import InternalError, NotFoundError, ValidationFailedError

logger = logging.getLogger(__name__)

ALL_ROLES = frozenset(UserRole)
ASSIGNABLE_ROLES = frozenset({UserRole.MAINTENANCE, UserRole.MANAGER, UserRole.ADMIN})


def _require_building(db: Session, building_id: int) -> Building:
    building = db.get(Building, building_id)
    if building is None:
        raise NotFoundError("Building not found")
    return building


def _require_unit_in_building(db: Session, unit_id: int, building_id: int) -> Unit:
    unit = db.execute(
        select(Unit).where(Unit.id == unit_id, Unit.building_id == building_id)
    ).scalar_one_or_none()
    if unit is None:
        raise NotFoundError("Unit not found in this building")
    return unit


class IssueService:
    """Service for creating and reading issues."""

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session
        self.binder = AttributionBinder(db_session)

    def get_issue(self, issue_id: int) -> Issue:
        issue = self.db.get(Issue, issue_id)
        if issue is None:
            raise NotFoundError("Issue not found")
        return issue

    def create_issue(
        self,
        principal: Principal,
        building_id: int,
        title: str,
        description: str,
        category: IssueCategory | str,
        priority: IssuePriority | str = IssuePriority.MEDIUM,
        unit_id: int | None = None,
        location: str | None = None,
    ) -> Issue:
        """Create an issue attributed to the building's current operator period.

        Args:
            principal: Acting principal (any authenticated role)
            building_id: Building the issue is reported in
            title: Short summary
            description: Details
            category: IssueCategory value
            priority: IssuePriority value
            unit_id: Optional unit inside the building
            location: Optional free-text location

        Returns:
            Created Issue (operator_period_id may be None)
        """
        require_role(principal, ALL_ROLES, "create issues")
        try:
            category = IssueCategory(category)
            priority = IssuePriority(priority)
        except ValueError as e:
            raise ValidationFailedError(str(e)) from e

        _require_building(self.db, building_id)
        if unit_id is not None:
            _require_unit_in_building(self.db, unit_id, building_id)

        try:
            issue = Issue(
                title=title,
                description=description,
                category=category,
                priority=priority,
                status=IssueStatus.PENDING,
                location=location,
                building_id=building_id,
                unit_id=unit_id,
                submitted_by_id=principal.user_id,
                operator_period_id=self.binder.bind_issue(building_id),
            )
            self.db.add(issue)
            self.db.commit()
            self.db.refresh(issue)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Error creating issue for building_id=%d", building_id, exc_info=True)
            raise InternalError("Failed to create issue") from e

        logger.info(
            "Issue %d created in building %d (operator period %s)",
            issue.id,
            building_id,
            issue.operator_period_id,
        )
        return issue


class WorkOrderService:
    """Service for creating and reading work orders."""

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session
        self.binder = AttributionBinder(db_session)

    def get_work_order(self, work_order_id: int) -> WorkOrder:
        work_order = self.db.get(WorkOrder, work_order_id)
        if work_order is None:
            raise NotFoundError("Work order not found")
        return work_order

    def create_work_order(
        self,
        principal: Principal,
        building_id: int,
        title: str,
        description: str,
        issue_id: int | None = None,
        unit_id: int | None = None,
        assigned_to_id: int | None = None,
        priority: WorkOrderPriority | str = WorkOrderPriority.MEDIUM,
        scheduled_date: datetime | str | None = None,
        estimated_cost: Decimal | None = None,
        notes: str | None = None,
    ) -> WorkOrder:
        """Create a work order, attributed to its issue's period when it has one.

        Raises:
            AuthError: Principal lacks MANAGER/ADMIN/SUPER_ADMIN
            NotFoundError: Building, unit, issue or assignee missing
            ValidationFailedError: Bad priority or scheduled date
        """
        require_role(principal, WRITE_ROLES, "create work orders")
        try:
            priority = WorkOrderPriority(priority)
        except ValueError as e:
            raise ValidationFailedError(str(e)) from e
        scheduled = (
            parse_instant(scheduled_date, "scheduled date") if scheduled_date is not None else None
        )

        _require_building(self.db, building_id)
        if unit_id is not None:
            _require_unit_in_building(self.db, unit_id, building_id)

        issue = None
        if issue_id is not None:
            issue = self.db.execute(
                select(Issue).where(Issue.id == issue_id, Issue.building_id == building_id)
            ).scalar_one_or_none()
            if issue is None:
                raise NotFoundError("Issue not found in this building")

        if assigned_to_id is not None:
            assignee = self.db.get(User, assigned_to_id)
            if assignee is None or assignee.role not in ASSIGNABLE_ROLES:
                raise NotFoundError("Assignee not found or not authorized for work orders")

        try:
            work_order = WorkOrder(
                title=title,
                description=description,
                issue_id=issue_id,
                building_id=building_id,
                unit_id=unit_id,
                assigned_to_id=assigned_to_id,
                priority=priority,
                status=WorkOrderStatus.PENDING,
                scheduled_date=scheduled,
                estimated_cost=estimated_cost,
                notes=notes,
                operator_period_id=self.binder.bind_work_order(building_id, issue),
            )
            self.db.add(work_order)
            self.db.commit()
            self.db.refresh(work_order)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Error creating work order for building_id=%d", building_id, exc_info=True)
            raise InternalError("Failed to create work order") from e

        logger.info(
            "Work order %d created in building %d (issue %s, operator period %s)",
            work_order.id,
            building_id,
            issue_id,
            work_order.operator_period_id,
        )
        return work_order


__all__ = ["IssueService", "WorkOrderService"]
