"""SQLAlchemy base model with common fields and model exports."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, TypeDecorator
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

# Base class for all models
Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime that behaves the same on every dialect.

    Values are stored as naive UTC and always come back as aware UTC, so
    comparisons between stored and freshly parsed instants never mix naive
    and aware datetimes (SQLite drops tzinfo on read).
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel:
    """Base model with common timestamp fields."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )


# Import models to register them with Base (after Base is defined)
# This must be after Base declaration to avoid circular imports
from buildops.models.organization import HoaOrganization, ManagementCompany  # noqa: E402
from buildops.models.user import User, UserRole  # noqa: E402
from buildops.models.building import Building, Unit  # noqa: E402
from buildops.models.operator_period import (  # noqa: E402
    HOAOperator,
    Operator,
    OperatorPeriod,
    OperatorPeriodStatus,
    OperatorType,
    PMOperator,
)
from buildops.models.issue import (  # noqa: E402
    Issue,
    IssueCategory,
    IssuePriority,
    IssueStatus,
)
from buildops.models.work_order import (  # noqa: E402
    WorkOrder,
    WorkOrderPriority,
    WorkOrderStatus,
)
from buildops.models.audit_log import AuditLog  # noqa: E402

__all__ = [
    "Base",
    "BaseModel",
    "UTCDateTime",
    "utcnow",
    "ManagementCompany",
    "HoaOrganization",
    "User",
    "UserRole",
    "Building",
    "Unit",
    "Operator",
    "PMOperator",
    "HOAOperator",
    "OperatorType",
    "OperatorPeriod",
    "OperatorPeriodStatus",
    "Issue",
    "IssueCategory",
    "IssuePriority",
    "IssueStatus",
    "WorkOrder",
    "WorkOrderPriority",
    "WorkOrderStatus",
    "AuditLog",
]
