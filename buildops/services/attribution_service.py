"""Attribution binder: which operator period a new issue or work order belongs to."""

import logging

from sqlalchemy.orm import Session

from buildops.models.issue import Issue
from buildops.services.operator_period_store import OperatorPeriodStore

logger = logging.getLogger(__name__)


class AttributionBinder:
    """Resolves the operator period to stamp on records at creation time.

    Called inside the creating transaction. A building without an ACTIVE
    period yields None (the unassigned bucket) rather than an error.
    """

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.store = OperatorPeriodStore(db_session)

    def bind_issue(self, building_id: int) -> int | None:
        """Operator period id for a new issue in ``building_id``."""
        active = self.store.get_active_period(building_id)
        if active is None:
            logger.debug("Building %d has no ACTIVE operator period; issue unassigned", building_id)
            return None
        return active.id

    def bind_work_order(self, building_id: int, issue: Issue | None = None) -> int | None:
        """Operator period id for a new work order.

        A work order raised from an issue inherits the issue's period, so
        follow-up work stays with the operator that received the report even
        if the building changed hands in between.
        """
        if issue is not None and issue.operator_period_id is not None:
            return issue.operator_period_id
        return self.bind_issue(building_id)


__all__ = ["AttributionBinder"]
