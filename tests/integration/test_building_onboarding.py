"""Integration tests for building onboarding."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import select

from buildops.models.audit_log import AuditLog
from buildops.models.operator_period import OperatorPeriodStatus, OperatorType
from buildops.services.building_service import BuildingService
from buildops.services.errors import AuthError, NotFoundError, ValidationFailedError
from buildops.services.operator_period_store import OperatorPeriodStore


@pytest.fixture
def service(db_session) -> BuildingService:
    return BuildingService(db_session)


def test_onboard_without_operator(db_session, service, admin):
    onboarded = service.onboard_building(
        "Harbor View Apartments",
        "12 Quay Street",
        city="Portland",
        state="ME",
        unit_numbers=["101", "102", "201"],
        actor=admin,
    )

    building = onboarded.building
    assert onboarded.initial_period is None
    assert building.total_units == 3
    assert sorted(unit.unit_number for unit in building.units) == ["101", "102", "201"]
    assert building.current_operator_period_id is None

    entry = db_session.execute(select(AuditLog)).scalar_one()
    assert entry.entity_type == "building"
    assert entry.action == "onboard"
    assert entry.changes == {"units": 3, "initial_period_id": None}


def test_onboard_with_initial_operator(db_session, service, hoa):
    onboarded = service.onboard_building(
        "Maple Court",
        "400 Maple Avenue",
        operator_type="HOA",
        operator_id=hoa.id,
        start_date="2024-01-01",
    )

    period = onboarded.initial_period
    assert period.status == OperatorPeriodStatus.ACTIVE
    assert period.operator_type == OperatorType.HOA
    assert period.start_date == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert onboarded.building.current_operator_period_id == period.id
    assert OperatorPeriodStore(db_session).find_violations(onboarded.building.id) == []


def test_operator_arguments_go_together(service, acme):
    with pytest.raises(ValidationFailedError, match="given together"):
        service.onboard_building("Maple Court", "400 Maple Avenue", operator_type="PM")
    with pytest.raises(ValidationFailedError, match="given together"):
        service.onboard_building(
            "Maple Court", "400 Maple Avenue", operator_id=acme.id, start_date="2024-01-01"
        )


def test_duplicate_unit_numbers(service):
    with pytest.raises(ValidationFailedError, match="unique"):
        service.onboard_building("Maple Court", "400 Maple Avenue", unit_numbers=["1A", "1A"])


def test_unknown_operator_creates_nothing(db_session, service):
    with pytest.raises(NotFoundError):
        service.onboard_building(
            "Maple Court",
            "400 Maple Avenue",
            operator_type="PM",
            operator_id=999,
            start_date="2024-01-01",
        )
    assert db_session.execute(select(AuditLog)).scalars().all() == []


def test_manager_cannot_onboard(service, manager):
    with pytest.raises(AuthError):
        service.onboard_building("Maple Court", "400 Maple Avenue", actor=manager)
