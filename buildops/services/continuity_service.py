"""Continuity queries: portfolio, operator timeline and per-period history.

All methods are pure reads. They never touch period status, end dates or the
building pointer, and see only committed transitions.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from buildops.models.building import Building, Unit
from buildops.models.issue import Issue
from buildops.models.operator_period import OperatorPeriod, OperatorPeriodStatus
from buildops.models.user import UserRole
from buildops.models.work_order import WorkOrder
from buildops.services.auth_service import Principal, require_role
from buildops.services.dates import parse_range_bounds
from buildops.services.errors import NotFoundError
from buildops.services.operator_period_store import OperatorPeriodStore

logger = logging.getLogger(__name__)

ALL_ROLES = frozenset(UserRole)


@dataclass
class PortfolioBuilding:
    """A building in the portfolio with its current operator and record counts."""

    building: Building
    current_period: OperatorPeriod | None
    issue_count: int
    work_order_count: int
    unit_count: int


@dataclass
class TimelineEntry:
    """One operator period with counts of records attributed to it."""

    period: OperatorPeriod
    issue_count: int
    work_order_count: int


@dataclass
class BuildingTimeline:
    building: Building
    timeline: list[TimelineEntry]


@dataclass
class HistoryPeriod:
    """One operator period with the records attributed to it."""

    period: OperatorPeriod
    issues: list[Issue] = field(default_factory=list)
    work_orders: list[WorkOrder] = field(default_factory=list)


@dataclass
class BuildingHistory:
    """Full attribution history, plus records that predate continuity tracking."""

    building: Building
    periods: list[HistoryPeriod]
    unassigned_issues: list[Issue]
    unassigned_work_orders: list[WorkOrder]


class ContinuityQueryService:
    """Read side of operator continuity."""

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session
        self.store = OperatorPeriodStore(db_session)

    def _require_building(self, building_id: int) -> Building:
        building = self.store.get_building(building_id)
        if building is None:
            raise NotFoundError("Building not found")
        return building

    def portfolio(self, principal: Principal) -> list[PortfolioBuilding]:
        """List the buildings a principal may see, with current operator and counts.

        Administrators see every building. Everyone else sees the buildings
        whose ACTIVE period is held by their own management company or HOA.

        Args:
            principal: Acting principal

        Returns:
            PortfolioBuilding list ordered by building name
        """
        require_role(principal, ALL_ROLES, "view the portfolio")

        issue_count = (
            select(func.count(Issue.id))
            .where(Issue.building_id == Building.id)
            .correlate(Building)
            .scalar_subquery()
        )
        work_order_count = (
            select(func.count(WorkOrder.id))
            .where(WorkOrder.building_id == Building.id)
            .correlate(Building)
            .scalar_subquery()
        )
        unit_count = (
            select(func.count(Unit.id))
            .where(Unit.building_id == Building.id)
            .correlate(Building)
            .scalar_subquery()
        )

        stmt = (
            select(Building, issue_count, work_order_count, unit_count)
            .outerjoin(OperatorPeriod, Building.current_operator_period_id == OperatorPeriod.id)
            .options(
                selectinload(Building.current_operator_period).selectinload(
                    OperatorPeriod.management_company
                ),
                selectinload(Building.current_operator_period).selectinload(
                    OperatorPeriod.hoa_organization
                ),
            )
            .order_by(Building.name.asc(), Building.id.asc())
        )

        if not principal.is_administrator:
            affiliations = []
            if principal.management_company_id is not None:
                affiliations.append(
                    OperatorPeriod.management_company_id == principal.management_company_id
                )
            if principal.hoa_organization_id is not None:
                affiliations.append(
                    OperatorPeriod.hoa_organization_id == principal.hoa_organization_id
                )
            if not affiliations:
                logger.debug("user_id=%d has no operator affiliation", principal.user_id)
                return []
            stmt = stmt.where(
                OperatorPeriod.status == OperatorPeriodStatus.ACTIVE,
                or_(*affiliations),
            )

        rows = self.db.execute(stmt).all()
        return [
            PortfolioBuilding(
                building=building,
                current_period=building.current_operator_period,
                issue_count=issues,
                work_order_count=work_orders,
                unit_count=units,
            )
            for building, issues, work_orders, units in rows
        ]

    def timeline(
        self,
        building_id: int,
        start_from: datetime | str | None = None,
        start_to: datetime | str | None = None,
    ) -> BuildingTimeline:
        """Operator periods of a building with per-period record counts.

        Counts are scoped by ``operator_period_id``, not building-wide.

        Args:
            building_id: Building to inspect
            start_from: Optional lower bound on period start (inclusive)
            start_to: Optional upper bound on period start (inclusive; a bare
                date covers the whole day)

        Returns:
            BuildingTimeline ordered by (start_date, created_at)

        Raises:
            ValidationFailedError: Malformed range bounds
            NotFoundError: Building does not exist
        """
        lower, upper, upper_inclusive = parse_range_bounds(start_from, start_to)
        building = self._require_building(building_id)

        issue_count = (
            select(func.count(Issue.id))
            .where(Issue.operator_period_id == OperatorPeriod.id)
            .correlate(OperatorPeriod)
            .scalar_subquery()
        )
        work_order_count = (
            select(func.count(WorkOrder.id))
            .where(WorkOrder.operator_period_id == OperatorPeriod.id)
            .correlate(OperatorPeriod)
            .scalar_subquery()
        )

        stmt = (
            select(OperatorPeriod, issue_count, work_order_count)
            .where(OperatorPeriod.building_id == building_id)
            .options(
                selectinload(OperatorPeriod.management_company),
                selectinload(OperatorPeriod.hoa_organization),
            )
        )
        if lower is not None:
            stmt = stmt.where(OperatorPeriod.start_date >= lower)
        if upper is not None:
            if upper_inclusive:
                stmt = stmt.where(OperatorPeriod.start_date <= upper)
            else:
                stmt = stmt.where(OperatorPeriod.start_date < upper)
        stmt = stmt.order_by(
            OperatorPeriod.start_date.asc(),
            OperatorPeriod.created_at.asc(),
            OperatorPeriod.id.asc(),
        )

        entries = [
            TimelineEntry(period=period, issue_count=issues, work_order_count=work_orders)
            for period, issues, work_orders in self.db.execute(stmt).all()
        ]
        return BuildingTimeline(building=building, timeline=entries)

    def history(self, building_id: int) -> BuildingHistory:
        """Every operator period with the issues and work orders attributed to it.

        Records without an operator period (filed while the building had no
        operator, or before continuity tracking existed) land in the
        unassigned bucket.

        Raises:
            NotFoundError: Building does not exist
        """
        building = self._require_building(building_id)
        periods = self.store.list_periods(building_id)

        by_period = {period.id: HistoryPeriod(period=period) for period in periods}
        unassigned_issues: list[Issue] = []
        unassigned_work_orders: list[WorkOrder] = []

        issues = self.db.execute(
            select(Issue)
            .where(Issue.building_id == building_id)
            .order_by(Issue.created_at.asc(), Issue.id.asc())
        ).scalars()
        for issue in issues:
            bucket = by_period.get(issue.operator_period_id)
            if bucket is None:
                unassigned_issues.append(issue)
            else:
                bucket.issues.append(issue)

        work_orders = self.db.execute(
            select(WorkOrder)
            .where(WorkOrder.building_id == building_id)
            .order_by(WorkOrder.created_at.asc(), WorkOrder.id.asc())
        ).scalars()
        for work_order in work_orders:
            bucket = by_period.get(work_order.operator_period_id)
            if bucket is None:
                unassigned_work_orders.append(work_order)
            else:
                bucket.work_orders.append(work_order)

        return BuildingHistory(
            building=building,
            periods=list(by_period.values()),
            unassigned_issues=unassigned_issues,
            unassigned_work_orders=unassigned_work_orders,
        )


__all__ = [
    "PortfolioBuilding",
    "TimelineEntry",
    "BuildingTimeline",
    "HistoryPeriod",
    "BuildingHistory",
    "ContinuityQueryService",
]
