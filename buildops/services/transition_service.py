"""Operator transition engine: atomic handoff of a building between operators.

A transition closes the building's ACTIVE period at the effective date, opens
the successor period at the same instant and moves the building's pointer, all
in one transaction. Preconditions are checked before anything is written, and
``from_operator_period_id`` works as a compare-and-swap token: the caller names
the period it believes is current and the handoff only proceeds if that is
still true.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from buildops.models.building import Building
from buildops.models.issue import Issue
from buildops.models.operator_period import OperatorPeriod, OperatorPeriodStatus, OperatorType
from buildops.models.work_order import WorkOrder
from buildops.services.audit_service import AuditService
from buildops.services.auth_service import WRITE_ROLES, Principal, require_role
from buildops.services.dates import parse_instant
from buildops.services.directory_service import DirectoryService
from buildops.services.errors import (
    ConflictError,
    ContinuityError,
    InternalError,
    NotFoundError,
    ValidationFailedError,
)
from buildops.services.operator_period_store import OperatorPeriodStore

logger = logging.getLogger(__name__)

MAX_HANDOFF_NOTES_LENGTH = 2000


@dataclass
class ContinuityCounters:
    """Building-wide record counts returned after a transition.

    A sanity signal that history is still reachable, not a correctness gate.
    """

    issues_in_building_history: int
    work_orders_in_building_history: int


@dataclass
class TransitionResult:
    """Outcome of a committed transition."""

    building: Building
    previous_period: OperatorPeriod | None
    next_period: OperatorPeriod
    continuity: ContinuityCounters


@dataclass
class RecordedPeriod:
    """Outcome of recording a single operator period."""

    building: Building
    period: OperatorPeriod


def _validate_notes(handoff_notes: str | None) -> None:
    if handoff_notes is not None and len(handoff_notes) > MAX_HANDOFF_NOTES_LENGTH:
        raise ValidationFailedError(
            f"handoff notes must be at most {MAX_HANDOFF_NOTES_LENGTH} characters"
        )


def _validate_operator_type(operator_type: OperatorType | str) -> OperatorType:
    try:
        return OperatorType(operator_type)
    except ValueError as e:
        raise ValidationFailedError("operator type must be PM or HOA") from e


class OperatorTransitionService:
    """Validates and executes operator handoffs against the operator period store."""

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session
        self.store = OperatorPeriodStore(db_session)
        self.directory = DirectoryService(db_session)

    def _require_building(self, building_id: int) -> Building:
        building = self.store.get_building(building_id)
        if building is None:
            raise NotFoundError("Building not found")
        return building

    def _describe_stale_period(self, building_id: int, period_id: int) -> str:
        period = self.store.get_period(period_id)
        if period is None or period.building_id != building_id:
            return f"operator period {period_id} does not belong to this building"
        return f"operator period {period_id} is {period.status.value}"

    def _count_building_history(self, building_id: int) -> ContinuityCounters:
        issue_count = self.db.execute(
            select(func.count(Issue.id)).where(Issue.building_id == building_id)
        ).scalar_one()
        work_order_count = self.db.execute(
            select(func.count(WorkOrder.id)).where(WorkOrder.building_id == building_id)
        ).scalar_one()
        return ContinuityCounters(
            issues_in_building_history=issue_count,
            work_orders_in_building_history=work_order_count,
        )

    def transition(
        self,
        building_id: int,
        from_operator_period_id: int | None,
        to_operator_type: OperatorType | str,
        to_operator_id: int,
        effective_date: datetime | str,
        handoff_notes: str | None = None,
        actor: Principal | None = None,
    ) -> TransitionResult:
        """Hand a building over to a new operator.

        Args:
            building_id: Building changing hands
            from_operator_period_id: Id of the period the caller believes is ACTIVE.
                Required whenever the building has an ACTIVE period; may be omitted
                only for the initial assignment.
            to_operator_type: "PM" or "HOA"
            to_operator_id: Management company or HOA organization id
            effective_date: ISO 8601 instant at which the new operator takes over
            handoff_notes: Optional free text (max 2000 chars)
            actor: Acting principal; None for trusted system callers

        Returns:
            TransitionResult with the closed and opened periods

        Raises:
            AuthError: Actor lacks MANAGER/ADMIN/SUPER_ADMIN
            ValidationFailedError: Malformed input or effective date not after current start
            NotFoundError: Building or target operator missing
            ConflictError: Stale or missing from_operator_period_id, or a concurrent
                transition committed first
            InternalError: Storage failure; nothing was written
        """
        if actor is not None:
            require_role(actor, WRITE_ROLES, "transition building operators")

        effective = parse_instant(effective_date, "effective date")
        _validate_notes(handoff_notes)
        operator_type = _validate_operator_type(to_operator_type)

        building = self._require_building(building_id)
        active = self.store.get_active_period(building_id)

        if active is None:
            if from_operator_period_id is not None:
                raise ConflictError(
                    "fromOperatorPeriodId does not match current ACTIVE period: "
                    "building has no ACTIVE operator period"
                )
        elif from_operator_period_id is None:
            raise ConflictError(
                "fromOperatorPeriodId is required when the building has an ACTIVE "
                f"operator period (current: {active.id})"
            )
        elif from_operator_period_id != active.id:
            logger.warning(
                "Stale transition for building_id=%d: from=%s current=%d",
                building_id,
                from_operator_period_id,
                active.id,
            )
            raise ConflictError(
                "fromOperatorPeriodId does not match current ACTIVE period: "
                f"{self._describe_stale_period(building_id, from_operator_period_id)} "
                f"(current: {active.id})"
            )

        if active is not None and effective <= active.start_date:
            raise ValidationFailedError("effective date must be after current period start")
        if active is None:
            # Initial assignment on a building whose earlier history was backfilled
            problem = self.store.find_placement_problem(
                building_id, effective, None, OperatorPeriodStatus.ACTIVE
            )
            if problem is not None:
                raise ValidationFailedError(problem)

        operator, operator_name = self.directory.resolve_operator(operator_type, to_operator_id)
        snapshot_id = active.id if active is not None else None

        try:
            with self.store.transaction():
                current = self.store.get_active_period(building_id, for_update=True)
                current_id = current.id if current is not None else None
                if current_id != snapshot_id:
                    raise ConflictError(
                        "Operator period changed while the transition was being prepared"
                    )

                previous_period = None
                if current is not None:
                    previous_period = self.store.close_period(current, effective)

                next_period = self.store.open_period(
                    building_id=building_id,
                    operator=operator,
                    start_date=effective,
                    status=OperatorPeriodStatus.ACTIVE,
                    handoff_notes=handoff_notes,
                )
                self.store.point_building_at(building, next_period)
                continuity = self._count_building_history(building_id)

                AuditService.log(
                    self.db,
                    "operator_period",
                    next_period.id,
                    "transition",
                    actor.user_id if actor is not None else None,
                    {
                        "building_id": building_id,
                        "previous_period_id": current_id,
                        "next_period_id": next_period.id,
                        "operator_type": operator_type.value,
                        "operator_id": operator.organization_id,
                        "effective_date": effective.isoformat(),
                    },
                )
        except ContinuityError:
            raise
        except IntegrityError as e:
            logger.error(
                "Integrity error during transition for building_id=%d: %s", building_id, e
            )
            raise ConflictError(
                "Another operator change was committed for this building; "
                "reload the timeline and retry"
            ) from e
        except SQLAlchemyError as e:
            logger.error("Transition failed for building_id=%d", building_id, exc_info=True)
            raise InternalError("Operator transition failed; no changes were saved") from e

        logger.info(
            "Building %d transitioned from period %s to period %d (%s %s, effective %s)",
            building_id,
            current_id,
            next_period.id,
            operator_type.value,
            operator_name,
            effective.isoformat(),
        )

        return TransitionResult(
            building=building,
            previous_period=previous_period,
            next_period=next_period,
            continuity=continuity,
        )

    def record_period(
        self,
        building_id: int,
        operator_type: OperatorType | str,
        operator_id: int,
        start_date: datetime | str,
        end_date: datetime | str | None = None,
        status: OperatorPeriodStatus | str = OperatorPeriodStatus.ACTIVE,
        handoff_notes: str | None = None,
        actor: Principal | None = None,
    ) -> RecordedPeriod:
        """Record a single operator period without handing over.

        ACTIVE is only accepted as a building's initial assignment; a building
        that already has an operator changes hands through ``transition``.
        PENDING records a planned handoff. ENDED, TERMINATED and RENEWED
        backfill history and never move the building pointer.

        Raises:
            AuthError: Actor lacks MANAGER/ADMIN/SUPER_ADMIN
            ValidationFailedError: Bad dates, or the interval does not fit the ledger
            NotFoundError: Building or operator missing
            ConflictError: ACTIVE requested while another period is ACTIVE
            InternalError: Storage failure; nothing was written
        """
        if actor is not None:
            require_role(actor, WRITE_ROLES, "record operator periods")

        start = parse_instant(start_date, "start date")
        end = parse_instant(end_date, "end date") if end_date is not None else None
        _validate_notes(handoff_notes)
        operator_type = _validate_operator_type(operator_type)
        try:
            status = OperatorPeriodStatus(status)
        except ValueError as e:
            raise ValidationFailedError("unknown operator period status") from e

        if end is not None and end <= start:
            raise ValidationFailedError("endDate must be later than startDate")

        building = self._require_building(building_id)
        operator, _ = self.directory.resolve_operator(operator_type, operator_id)
        active = self.store.get_active_period(building_id)

        if status == OperatorPeriodStatus.ACTIVE:
            if active is not None:
                raise ConflictError(
                    "An ACTIVE operator period already exists for this building; "
                    "use a transition to change operators"
                )
            if end is not None:
                raise ValidationFailedError("an ACTIVE period cannot have an end date")
        elif status == OperatorPeriodStatus.PENDING:
            if end is not None:
                raise ValidationFailedError("a PENDING period cannot have an end date")
            if active is not None and start <= active.start_date:
                raise ValidationFailedError("start date must be after current period start")
        elif end is None:
            raise ValidationFailedError(f"a {status.value} period requires an end date")

        if status != OperatorPeriodStatus.PENDING:
            problem = self.store.find_placement_problem(building_id, start, end, status)
            if problem is not None:
                raise ValidationFailedError(problem)

        try:
            with self.store.transaction():
                period = self.store.open_period(
                    building_id=building_id,
                    operator=operator,
                    start_date=start,
                    status=status,
                    end_date=end,
                    handoff_notes=handoff_notes,
                )
                if status == OperatorPeriodStatus.ACTIVE:
                    self.store.point_building_at(building, period)

                AuditService.log(
                    self.db,
                    "operator_period",
                    period.id,
                    "record",
                    actor.user_id if actor is not None else None,
                    {"building_id": building_id, "status": status.value},
                )
        except ContinuityError:
            raise
        except IntegrityError as e:
            logger.error("Integrity error recording period for building_id=%d: %s", building_id, e)
            raise ConflictError(
                "Another operator change was committed for this building; "
                "reload the timeline and retry"
            ) from e
        except SQLAlchemyError as e:
            logger.error("Recording period failed for building_id=%d", building_id, exc_info=True)
            raise InternalError("Recording operator period failed; no changes were saved") from e

        logger.info(
            "Recorded %s operator period %d for building %d", status.value, period.id, building_id
        )
        return RecordedPeriod(building=building, period=period)


__all__ = [
    "ContinuityCounters",
    "TransitionResult",
    "RecordedPeriod",
    "OperatorTransitionService",
    "MAX_HANDOFF_NOTES_LENGTH",
]
