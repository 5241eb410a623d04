"""Integration tests for attributing issues and work orders to operator periods."""

from datetime import datetime, timezone

import pytest

from buildops.models.building import Building, Unit
from buildops.models.issue import IssueCategory, IssueStatus
from buildops.models.user import UserRole
from buildops.models.work_order import WorkOrderStatus
from buildops.services.attribution_service import AttributionBinder
from buildops.services.errors import AuthError, NotFoundError, ValidationFailedError
from buildops.services.issue_service import IssueService, WorkOrderService
from buildops.services.transition_service import OperatorTransitionService

JUN_1 = datetime(2024, 6, 1, tzinfo=timezone.utc)


def _hand_over(db_session, building, hoa):
    return OperatorTransitionService(db_session).transition(
        building.id, building.current_operator_period_id, "HOA", hoa.id, JUN_1
    )


def _report(db_session, principal, building_id, title="Leaking tap", **kwargs):
    return IssueService(db_session).create_issue(
        principal,
        building_id=building_id,
        title=title,
        description="Kitchen tap drips",
        category=IssueCategory.PLUMBING,
        **kwargs,
    )


class TestAttributionBinder:
    def test_issue_binds_to_active_period(self, db_session, managed_building):
        binder = AttributionBinder(db_session)
        assert binder.bind_issue(managed_building.id) == managed_building.current_operator_period_id

    def test_no_active_period_binds_to_none(self, db_session, building):
        binder = AttributionBinder(db_session)
        assert binder.bind_issue(building.id) is None
        assert binder.bind_work_order(building.id) is None

    def test_work_order_without_issue_uses_active_period(self, db_session, managed_building):
        binder = AttributionBinder(db_session)
        assert (
            binder.bind_work_order(managed_building.id)
            == managed_building.current_operator_period_id
        )


class TestIssueAttribution:
    def test_issue_keeps_period_across_handoff(self, db_session, managed_building, hoa, tenant):
        first_period = managed_building.current_operator_period_id
        issue = _report(db_session, tenant, managed_building.id)
        assert issue.operator_period_id == first_period
        assert issue.status == IssueStatus.PENDING
        assert issue.submitted_by_id == tenant.user_id

        result = _hand_over(db_session, managed_building, hoa)
        db_session.expire_all()

        fetched = IssueService(db_session).get_issue(issue.id)
        assert fetched.operator_period_id == first_period
        assert fetched.operator_period_id != result.next_period.id

    def test_work_order_inherits_issue_period_after_handoff(
        self, db_session, managed_building, hoa, tenant, manager
    ):
        first_period = managed_building.current_operator_period_id
        issue = _report(db_session, tenant, managed_building.id)
        _hand_over(db_session, managed_building, hoa)

        work_order = WorkOrderService(db_session).create_work_order(
            manager,
            building_id=managed_building.id,
            title="Replace tap washer",
            description="Follow-up on the leak",
            issue_id=issue.id,
        )

        assert work_order.operator_period_id == first_period
        assert work_order.status == WorkOrderStatus.PENDING

    def test_new_records_after_handoff_go_to_new_period(
        self, db_session, managed_building, hoa, tenant, manager
    ):
        result = _hand_over(db_session, managed_building, hoa)

        issue = _report(db_session, tenant, managed_building.id, title="Hallway light")
        work_order = WorkOrderService(db_session).create_work_order(
            manager,
            building_id=managed_building.id,
            title="Repaint lobby",
            description="Scheduled maintenance",
        )

        assert issue.operator_period_id == result.next_period.id
        assert work_order.operator_period_id == result.next_period.id

    def test_unassigned_building_creates_unattributed_issue(self, db_session, building, tenant):
        issue = _report(db_session, tenant, building.id)
        assert issue.id is not None
        assert issue.operator_period_id is None

    def test_work_order_from_unattributed_issue_uses_active_period(
        self, db_session, building, acme, tenant, manager
    ):
        issue = _report(db_session, tenant, building.id)
        result = OperatorTransitionService(db_session).transition(
            building.id, None, "PM", acme.id, "2024-01-01T00:00:00Z"
        )

        work_order = WorkOrderService(db_session).create_work_order(
            manager,
            building_id=building.id,
            title="Fix it",
            description="Now that someone operates the building",
            issue_id=issue.id,
        )
        assert work_order.operator_period_id == result.next_period.id


class TestCreationValidation:
    def test_issue_in_unknown_building(self, db_session, tenant):
        with pytest.raises(NotFoundError, match="Building not found"):
            _report(db_session, tenant, 404)

    def test_issue_with_unit_of_other_building(self, db_session, managed_building, tenant):
        other = Building(name="Riverside Lofts", address="8 Mill Road", total_units=1)
        db_session.add(other)
        db_session.flush()
        foreign_unit = Unit(building_id=other.id, unit_number="L1")
        db_session.add(foreign_unit)
        db_session.commit()

        with pytest.raises(NotFoundError, match="Unit not found"):
            _report(db_session, tenant, managed_building.id, unit_id=foreign_unit.id)

    def test_issue_with_own_unit(self, db_session, managed_building, tenant):
        unit = managed_building.units[0]
        issue = _report(db_session, tenant, managed_building.id, unit_id=unit.id, location="Kitchen")
        assert issue.unit_id == unit.id
        assert issue.location == "Kitchen"

    def test_bad_category(self, db_session, managed_building, tenant):
        with pytest.raises(ValidationFailedError):
            IssueService(db_session).create_issue(
                tenant, managed_building.id, "Title", "Description", category="GARDENING"
            )

    def test_tenant_cannot_create_work_order(self, db_session, managed_building, tenant):
        with pytest.raises(AuthError):
            WorkOrderService(db_session).create_work_order(
                tenant, managed_building.id, "Title", "Description"
            )

    def test_work_order_issue_must_be_in_same_building(
        self, db_session, managed_building, tenant, manager
    ):
        other = Building(name="Riverside Lofts", address="8 Mill Road")
        db_session.add(other)
        db_session.commit()
        issue = _report(db_session, tenant, other.id)

        with pytest.raises(NotFoundError, match="Issue not found in this building"):
            WorkOrderService(db_session).create_work_order(
                manager, managed_building.id, "Title", "Description", issue_id=issue.id
            )

    def test_work_order_assignee_must_be_staff(
        self, db_session, managed_building, manager, tenant_user, user_factory
    ):
        service = WorkOrderService(db_session)
        with pytest.raises(NotFoundError, match="Assignee"):
            service.create_work_order(
                manager,
                managed_building.id,
                "Title",
                "Description",
                assigned_to_id=tenant_user.id,
            )

        technician = user_factory(UserRole.MAINTENANCE, "tech@acme.example")
        work_order = service.create_work_order(
            manager,
            managed_building.id,
            "Title",
            "Description",
            assigned_to_id=technician.id,
            scheduled_date="2024-07-01T09:00:00Z",
        )
        assert work_order.assigned_to_id == technician.id
        assert work_order.scheduled_date == datetime(2024, 7, 1, 9, tzinfo=timezone.utc)

    def test_get_missing_records(self, db_session):
        with pytest.raises(NotFoundError):
            IssueService(db_session).get_issue(1)
        with pytest.raises(NotFoundError):
            WorkOrderService(db_session).get_work_order(1)
