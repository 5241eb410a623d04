"""Operator period store: persistence and invariants for the operator ledger.

The store owns every write to ``operator_periods`` and to the building's
``current_operator_period_id`` pointer. Callers group writes with
``transaction()`` so that closing the old period, opening the new one and
moving the pointer commit together or not at all.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from buildops.models.building import Building
from buildops.models.operator_period import (
    Operator,
    OperatorPeriod,
    OperatorPeriodStatus,
    OperatorType,
)

logger = logging.getLogger(__name__)


class OperatorPeriodStore:
    """Reads and writes operator periods and the building -> active period pointer."""

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_building(self, building_id: int) -> Building | None:
        return self.db.get(Building, building_id)

    def get_period(self, period_id: int) -> OperatorPeriod | None:
        return self.db.get(OperatorPeriod, period_id)

    def get_active_period(self, building_id: int, for_update: bool = False) -> OperatorPeriod | None:
        """Get the ACTIVE period for a building.

        Args:
            building_id: Building to look up
            for_update: Lock the row (SELECT ... FOR UPDATE) on dialects that support it

        Returns:
            The ACTIVE OperatorPeriod or None if the building has no operator
        """
        stmt = (
            select(OperatorPeriod)
            .where(
                OperatorPeriod.building_id == building_id,
                OperatorPeriod.status == OperatorPeriodStatus.ACTIVE,
            )
            .order_by(OperatorPeriod.start_date.desc())
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalars().first()

    def list_periods(
        self,
        building_id: int,
        start_from: datetime | None = None,
        start_to: datetime | None = None,
        start_to_inclusive: bool = True,
    ) -> list[OperatorPeriod]:
        """List a building's periods ordered by (start_date, created_at) ascending.

        Args:
            building_id: Building to list
            start_from: Only periods starting at or after this instant
            start_to: Only periods starting at or before (or strictly before) this instant
            start_to_inclusive: Whether ``start_to`` itself is included

        Returns:
            List of OperatorPeriod objects
        """
        stmt = select(OperatorPeriod).where(OperatorPeriod.building_id == building_id)
        if start_from is not None:
            stmt = stmt.where(OperatorPeriod.start_date >= start_from)
        if start_to is not None:
            if start_to_inclusive:
                stmt = stmt.where(OperatorPeriod.start_date <= start_to)
            else:
                stmt = stmt.where(OperatorPeriod.start_date < start_to)
        stmt = stmt.order_by(OperatorPeriod.start_date.asc(), OperatorPeriod.created_at.asc())
        return list(self.db.execute(stmt).scalars())

    # ------------------------------------------------------------------
    # Writes (callers wrap these in transaction())
    # ------------------------------------------------------------------

    def open_period(
        self,
        building_id: int,
        operator: Operator,
        start_date: datetime,
        status: OperatorPeriodStatus = OperatorPeriodStatus.ACTIVE,
        end_date: datetime | None = None,
        handoff_notes: str | None = None,
    ) -> OperatorPeriod:
        """Create a period row and flush it so its id is available."""
        period = OperatorPeriod(
            building_id=building_id,
            start_date=start_date,
            end_date=end_date,
            status=status,
            handoff_notes=handoff_notes,
        )
        period.operator = operator
        self.db.add(period)
        self.db.flush()

        logger.debug(
            "Opened operator period id=%d building_id=%d operator=%s status=%s",
            period.id,
            building_id,
            operator,
            status.value,
        )
        return period

    def close_period(
        self,
        period: OperatorPeriod,
        end_date: datetime,
        status: OperatorPeriodStatus = OperatorPeriodStatus.ENDED,
    ) -> OperatorPeriod:
        """Close a period at ``end_date``. The end date can only be set once.

        Raises:
            ValueError: If the period is already closed or end_date is not after its start
        """
        if period.end_date is not None:
            raise ValueError(f"Operator period {period.id} is already closed")
        if end_date <= period.start_date:
            raise ValueError(
                f"Operator period {period.id} cannot end before or at its start date"
            )

        period.status = status
        period.end_date = end_date
        self.db.flush()
        return period

    def point_building_at(self, building: Building, period: OperatorPeriod) -> None:
        """Move the building's active-period pointer and legacy PM pointer to ``period``."""
        building.current_operator_period = period
        building.current_operator_period_id = period.id
        if period.operator_type == OperatorType.PM:
            building.current_management_id = period.management_company_id
        else:
            building.current_management_id = None
        self.db.flush()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Commit on success; roll back everything and re-raise on any error."""
        try:
            yield self.db
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # ------------------------------------------------------------------
    # Invariants
    # ------------------------------------------------------------------

    def find_placement_problem(
        self,
        building_id: int,
        start_date: datetime,
        end_date: datetime | None,
        status: OperatorPeriodStatus,
    ) -> str | None:
        """Check whether a new period fits into the building's ledger.

        PENDING periods are plans, not history, and are ignored. Against the
        remaining periods the new interval must not overlap anything, must start
        where an ENDED predecessor stopped, and (when ENDED itself) must stop
        where its successor starts. An ACTIVE period must be the latest one.

        Returns:
            Human-readable problem description, or None if the period fits
        """
        ledger = [
            p
            for p in self.list_periods(building_id)
            if p.status != OperatorPeriodStatus.PENDING
        ]
        before = [p for p in ledger if p.start_date < start_date]
        after = [p for p in ledger if p.start_date >= start_date]

        if before:
            previous = before[-1]
            if previous.end_date is None or previous.end_date > start_date:
                return f"period overlaps operator period {previous.id}"
            if previous.status == OperatorPeriodStatus.ENDED and previous.end_date != start_date:
                return (
                    f"period must start when operator period {previous.id} ended "
                    f"({previous.end_date.isoformat()})"
                )

        if after:
            following = after[0]
            if status == OperatorPeriodStatus.ACTIVE:
                return f"an ACTIVE period cannot start before operator period {following.id}"
            if end_date is None or end_date > following.start_date:
                return f"period overlaps operator period {following.id}"
            if status == OperatorPeriodStatus.ENDED and end_date != following.start_date:
                return (
                    f"an ENDED period must end when operator period {following.id} starts "
                    f"({following.start_date.isoformat()})"
                )

        return None

    def find_violations(self, building_id: int) -> list[str]:
        """Evaluate the ledger invariants for one building.

        Returns:
            List of violation descriptions (empty when the ledger is consistent)
        """
        violations: list[str] = []
        building = self.get_building(building_id)
        periods = self.list_periods(building_id)

        active = [p for p in periods if p.status == OperatorPeriodStatus.ACTIVE]
        if len(active) > 1:
            violations.append(
                f"building {building_id} has {len(active)} ACTIVE periods: "
                f"{[p.id for p in active]}"
            )

        if building is not None:
            expected_pointer = active[0].id if len(active) == 1 else None
            if building.current_operator_period_id != expected_pointer:
                violations.append(
                    f"building {building_id} points at period "
                    f"{building.current_operator_period_id}, ACTIVE period is {expected_pointer}"
                )

        for period in periods:
            pm_set = period.management_company_id is not None
            hoa_set = period.hoa_organization_id is not None
            if pm_set == hoa_set:
                violations.append(f"period {period.id} must reference exactly one operator")
            elif (period.operator_type == OperatorType.PM) != pm_set:
                violations.append(
                    f"period {period.id} operator reference does not match type "
                    f"{period.operator_type.value}"
                )
            if period.is_active and period.end_date is not None:
                violations.append(f"ACTIVE period {period.id} has an end date")

        ledger = [p for p in periods if p.status != OperatorPeriodStatus.PENDING]
        for current, following in zip(ledger, ledger[1:]):
            if current.end_date is None:
                violations.append(
                    f"period {current.id} is open-ended but followed by period {following.id}"
                )
            elif current.end_date > following.start_date:
                violations.append(f"periods {current.id} and {following.id} overlap")
            elif (
                current.status == OperatorPeriodStatus.ENDED
                and current.end_date != following.start_date
            ):
                violations.append(
                    f"gap between period {current.id} (ends {current.end_date.isoformat()}) "
                    f"and period {following.id} (starts {following.start_date.isoformat()})"
                )

        return violations


__all__ = ["OperatorPeriodStore"]
