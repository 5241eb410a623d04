"""Building onboarding, optionally with the building's first operator period."""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from buildops.models.building import Building, Unit
from buildops.models.operator_period import OperatorPeriod, OperatorPeriodStatus, OperatorType
from buildops.services.audit_service import AuditService
from buildops.services.auth_service import ADMIN_ROLES, Principal, require_role
from buildops.services.dates import parse_instant
from buildops.services.directory_service import DirectoryService
from buildops.services.errors import ContinuityError, InternalError, ValidationFailedError
from buildops.services.operator_period_store import OperatorPeriodStore

logger = logging.getLogger(__name__)


@dataclass
class OnboardedBuilding:
    building: Building
    initial_period: OperatorPeriod | None


class BuildingService:
    """Creates buildings and their units."""

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session
        self.store = OperatorPeriodStore(db_session)
        self.directory = DirectoryService(db_session)

    def onboard_building(
        self,
        name: str,
        address: str,
        city: str | None = None,
        state: str | None = None,
        zip_code: str | None = None,
        unit_numbers: list[str] | None = None,
        operator_type: OperatorType | str | None = None,
        operator_id: int | None = None,
        start_date: datetime | str | None = None,
        actor: Principal | None = None,
    ) -> OnboardedBuilding:
        """Create a building, its units and optionally its first ACTIVE period.

        The operator arguments go together: either all of ``operator_type``,
        ``operator_id`` and ``start_date`` are given, or none is.

        Args:
            name: Building name
            address: Street address
            city: City
            state: State
            zip_code: Postal code
            unit_numbers: Unit numbers to create (unique within the building)
            operator_type: "PM" or "HOA" for the initial operator
            operator_id: Organization id of the initial operator
            start_date: When the initial operator takes over
            actor: Acting principal; None for trusted system callers

        Returns:
            OnboardedBuilding with the building and the initial period (or None)

        Raises:
            AuthError: Actor is not ADMIN/SUPER_ADMIN
            ValidationFailedError: Incomplete operator arguments or duplicate units
            NotFoundError: Initial operator organization missing
        """
        if actor is not None:
            require_role(actor, ADMIN_ROLES, "onboard buildings")

        operator_args = (operator_type, operator_id, start_date)
        if any(arg is not None for arg in operator_args) and any(
            arg is None for arg in operator_args
        ):
            raise ValidationFailedError(
                "operator type, operator id and start date must be given together"
            )

        unit_numbers = list(unit_numbers or [])
        if len(set(unit_numbers)) != len(unit_numbers):
            raise ValidationFailedError("unit numbers must be unique within a building")

        operator = None
        start = None
        if operator_type is not None:
            try:
                operator_type = OperatorType(operator_type)
            except ValueError as e:
                raise ValidationFailedError("operator type must be PM or HOA") from e
            start = parse_instant(start_date, "start date")
            operator, _ = self.directory.resolve_operator(operator_type, operator_id)

        try:
            with self.store.transaction():
                building = Building(
                    name=name,
                    address=address,
                    city=city,
                    state=state,
                    zip_code=zip_code,
                    total_units=len(unit_numbers),
                )
                self.db.add(building)
                self.db.flush()

                for number in unit_numbers:
                    self.db.add(Unit(building_id=building.id, unit_number=number))

                period = None
                if operator is not None:
                    period = self.store.open_period(
                        building_id=building.id,
                        operator=operator,
                        start_date=start,
                        status=OperatorPeriodStatus.ACTIVE,
                    )
                    self.store.point_building_at(building, period)

                AuditService.log(
                    self.db,
                    "building",
                    building.id,
                    "onboard",
                    actor.user_id if actor is not None else None,
                    {
                        "units": len(unit_numbers),
                        "initial_period_id": period.id if period is not None else None,
                    },
                )
        except ContinuityError:
            raise
        except IntegrityError as e:
            logger.error("Integrity error onboarding building %r: %s", name, e)
            raise ValidationFailedError("Building could not be created") from e
        except SQLAlchemyError as e:
            logger.error("Onboarding building %r failed", name, exc_info=True)
            raise InternalError("Building onboarding failed; no changes were saved") from e

        logger.info(
            "Onboarded building %d (%s) with %d units, initial period %s",
            building.id,
            name,
            len(unit_numbers),
            period.id if period is not None else None,
        )
        return OnboardedBuilding(building=building, initial_period=period)


__all__ = ["OnboardedBuilding", "BuildingService"]
