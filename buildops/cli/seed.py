"""CLI entry point for seeding a development database with demo data.

Creates two management companies, one HOA, a handful of users and buildings
(onboarded with their first operator period), hands one building over to the
HOA, files issues and work orders on both sides of the handoff and finally
checks the operator ledger invariants.

Usage:
    python -m buildops.cli.seed
    buildops-seed

Exit Codes:
    0 - Success: Demo data created (or already present) and ledger consistent
    1 - Failure: Schema not migrated, error encountered or invariant violated
"""

import sys
from datetime import datetime, timezone

from sqlalchemy import func, inspect, select

from buildops.models.building import Building
from buildops.models.issue import IssueCategory, IssuePriority
from buildops.models.operator_period import OperatorPeriod, OperatorType
from buildops.models.organization import HoaOrganization, ManagementCompany
from buildops.models.user import User, UserRole
from buildops.services.auth_service import Principal
from buildops.services.building_service import BuildingService
from buildops.services.issue_service import IssueService, WorkOrderService
from buildops.services.logging import setup_cli_logging
from buildops.services.operator_period_store import OperatorPeriodStore
from buildops.services.transition_service import OperatorTransitionService

DEMO_BUILDINGS = [
    ("Harbor View Apartments", "12 Quay Street", ["101", "102", "201", "202"]),
    ("Maple Court", "400 Maple Avenue", ["1A", "1B", "2A"]),
    ("Riverside Lofts", "8 Mill Road", ["L1", "L2"]),
]


def _seed(db, logger) -> None:
    acme = ManagementCompany(name="Acme Property Management", email="ops@acme.example")
    northside = ManagementCompany(name="Northside Realty", email="hello@northside.example")
    hoa = HoaOrganization(name="Maple Court Owners Association", email="board@maple.example")
    db.add_all([acme, northside, hoa])
    db.flush()

    admin = User(name="Ada Admin", email="admin@buildops.example", role=UserRole.ADMIN)
    manager = User(
        name="Morgan Manager",
        email="morgan@acme.example",
        role=UserRole.MANAGER,
        management_company_id=acme.id,
    )
    tenant = User(name="Toni Tenant", email="toni@tenant.example", role=UserRole.TENANT)
    db.add_all([admin, manager, tenant])
    db.commit()
    logger.info("Created organizations and users")

    admin_principal = Principal.from_user(admin)
    manager_principal = Principal.from_user(manager)
    tenant_principal = Principal.from_user(tenant)

    onboarding = BuildingService(db)
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    buildings = []
    for (name, address, units), company in zip(DEMO_BUILDINGS, [acme, acme, northside]):
        onboarded = onboarding.onboard_building(
            name=name,
            address=address,
            city="Springfield",
            state="IL",
            unit_numbers=units,
            operator_type=OperatorType.PM,
            operator_id=company.id,
            start_date=start,
            actor=admin_principal,
        )
        buildings.append(onboarded.building)
    logger.info("Onboarded %d buildings", len(buildings))

    maple = buildings[1]
    issues = IssueService(db)
    work_orders = WorkOrderService(db)

    leak = issues.create_issue(
        tenant_principal,
        building_id=maple.id,
        title="Leaking kitchen tap",
        description="Tap drips constantly",
        category=IssueCategory.PLUMBING,
        priority=IssuePriority.HIGH,
    )
    work_orders.create_work_order(
        manager_principal,
        building_id=maple.id,
        title="Replace tap washer",
        description="Replace washer on kitchen tap",
        issue_id=leak.id,
    )

    handoff = OperatorTransitionService(db).transition(
        building_id=maple.id,
        from_operator_period_id=maple.current_operator_period_id,
        to_operator_type=OperatorType.HOA,
        to_operator_id=hoa.id,
        effective_date=datetime(2024, 6, 1, tzinfo=timezone.utc),
        handoff_notes="Owners association takes over self-management",
        actor=admin_principal,
    )
    logger.info(
        "Handed %s over to %s (period %d)", maple.name, hoa.name, handoff.next_period.id
    )

    issues.create_issue(
        tenant_principal,
        building_id=maple.id,
        title="Hallway light out",
        description="Second floor hallway light does not turn on",
        category=IssueCategory.ELECTRICAL,
    )


def main() -> int:
    """
    Main entry point for demo data seeding.

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    logger = setup_cli_logging()
    try:
        from buildops.services import SessionLocal, engine

        # Tables come from Alembic migrations only
        if not inspect(engine).has_table(OperatorPeriod.__tablename__):
            logger.error("Database schema is missing; run `alembic upgrade head` first")
            return 1

        db = SessionLocal()
        try:
            if db.execute(select(func.count(Building.id))).scalar_one() > 0:
                logger.info("Database already has buildings; skipping demo data")
            else:
                _seed(db, logger)

            store = OperatorPeriodStore(db)
            violations = []
            for building_id in db.execute(select(Building.id)).scalars().all():
                violations.extend(store.find_violations(building_id))
        finally:
            db.close()

        if violations:
            for violation in violations:
                logger.error("Ledger invariant violated: %s", violation)
            return 1

        logger.info("Seed complete; operator ledger is consistent")
        return 0

    except KeyboardInterrupt:
        logger.warning("Seed interrupted by user")
        return 1
    except Exception as e:
        logger.error("Seed failed: %s", e, exc_info=True)
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
