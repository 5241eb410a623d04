"""Transactions on a file-backed database stay isolated per session."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from buildops.models import Base
from buildops.models.building import Building
from buildops.models.operator_period import OperatorPeriod, OperatorPeriodStatus, OperatorType
from buildops.models.organization import HoaOrganization, ManagementCompany
from buildops.services import build_engine
from buildops.services.errors import InternalError
from buildops.services.operator_period_store import OperatorPeriodStore
from buildops.services.transition_service import OperatorTransitionService


@pytest.fixture
def file_sessions(tmp_path):
    """Session factory on a SQLite file, plus a seeded building managed by a PM."""
    engine = build_engine(f"sqlite:///{tmp_path / 'buildops.db'}")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    setup = factory()
    company = ManagementCompany(name="Acme Property Management")
    association = HoaOrganization(name="Maple Court Owners Association")
    building = Building(name="Maple Court", address="400 Maple Avenue", total_units=0)
    setup.add_all([company, association, building])
    setup.commit()
    OperatorTransitionService(setup).transition(
        building.id,
        None,
        OperatorType.PM,
        company.id,
        datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    ids = {
        "building": building.id,
        "hoa": association.id,
        "period": building.current_operator_period_id,
    }
    setup.close()

    yield factory, ids

    engine.dispose()


def test_sessions_use_separate_connections(file_sessions):
    factory, _ = file_sessions
    first, second = factory(), factory()
    try:
        first_connection = first.connection().connection.dbapi_connection
        second_connection = second.connection().connection.dbapi_connection
        assert first_connection is not second_connection
    finally:
        first.close()
        second.close()


def test_commit_elsewhere_does_not_leak_failed_transition(file_sessions, monkeypatch):
    factory, ids = file_sessions
    writer, bystander = factory(), factory()

    def commit_bystander_then_fail(self, building, period):
        # The writer has flushed the closed and opened periods by now
        bystander.execute(select(Building).where(Building.id == ids["building"])).scalar_one()
        bystander.commit()
        raise OperationalError("UPDATE buildings", {}, Exception("disk I/O error"))

    monkeypatch.setattr(OperatorPeriodStore, "point_building_at", commit_bystander_then_fail)

    try:
        with pytest.raises(InternalError, match="no changes were saved"):
            OperatorTransitionService(writer).transition(
                ids["building"],
                ids["period"],
                OperatorType.HOA,
                ids["hoa"],
                "2024-06-01T00:00:00Z",
            )
    finally:
        writer.close()
        bystander.close()

    monkeypatch.undo()
    check = factory()
    try:
        periods = check.execute(select(OperatorPeriod)).scalars().all()
        assert [(p.id, p.status, p.end_date) for p in periods] == [
            (ids["period"], OperatorPeriodStatus.ACTIVE, None)
        ]
        building = check.get(Building, ids["building"])
        assert building.current_operator_period_id == ids["period"]
        assert OperatorPeriodStore(check).find_violations(ids["building"]) == []
    finally:
        check.close()
