"""Issue ORM model with permanent operator-period attribution."""

from datetime import datetime
from enum import Enum

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from buildops.models import Base, BaseModel, UTCDateTime


class IssueCategory(str, Enum):
    PLUMBING = "PLUMBING"
    ELECTRICAL = "ELECTRICAL"
    HVAC = "HVAC"
    APPLIANCE = "APPLIANCE"
    STRUCTURAL = "STRUCTURAL"
    SECURITY = "SECURITY"
    CLEANING = "CLEANING"
    PEST_CONTROL = "PEST_CONTROL"
    OTHER = "OTHER"


class IssuePriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class IssueStatus(str, Enum):
    PENDING = "PENDING"
    IN_REVIEW = "IN_REVIEW"
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


def guard_attribution(record, period_id: int | None) -> int | None:
    """Allow ``operator_period_id`` to be set only before the record is persisted."""
    if record.id is not None and record.operator_period_id != period_id:
        raise ValueError(
            f"{type(record).__name__} {record.id} is attributed to operator period "
            f"{record.operator_period_id}; attribution cannot be changed"
        )
    return period_id


class Issue(Base, BaseModel):
    """Maintenance issue reported against a building.

    ``operator_period_id`` records which operator period was active when the
    issue was filed. It is set once at creation and never changes, so the
    responsible operator stays answerable after the building changes hands.
    """

    __tablename__ = "issues"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[IssueCategory] = mapped_column(
        SQLEnum(IssueCategory, native_enum=False, length=20), nullable=False
    )
    priority: Mapped[IssuePriority] = mapped_column(
        SQLEnum(IssuePriority, native_enum=False, length=10),
        nullable=False,
        default=IssuePriority.MEDIUM,
    )
    status: Mapped[IssueStatus] = mapped_column(
        SQLEnum(IssueStatus, native_enum=False, length=20),
        nullable=False,
        default=IssueStatus.PENDING,
    )
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)

    building_id: Mapped[int] = mapped_column(
        ForeignKey("buildings.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    unit_id: Mapped[int | None] = mapped_column(
        ForeignKey("units.id", ondelete="SET NULL"), nullable=True
    )
    submitted_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    operator_period_id: Mapped[int | None] = mapped_column(
        ForeignKey("operator_periods.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
        comment="Operator period active when the issue was created",
    )
    completed_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    building: Mapped["Building"] = relationship("Building")  # noqa: F821
    operator_period: Mapped["OperatorPeriod | None"] = relationship(  # noqa: F821
        "OperatorPeriod"
    )
    work_orders: Mapped[list["WorkOrder"]] = relationship(  # noqa: F821
        "WorkOrder", back_populates="issue"
    )

    __table_args__ = (Index("ix_issues_building_period", "building_id", "operator_period_id"),)

    @validates("operator_period_id")
    def _validate_operator_period_id(self, key, value):
        return guard_attribution(self, value)

    def __repr__(self) -> str:
        return (
            f"<Issue(id={self.id}, building_id={self.building_id}, "
            f"operator_period_id={self.operator_period_id}, status={self.status})>"
        )


__all__ = ["Issue", "IssueCategory", "IssuePriority", "IssueStatus", "guard_attribution"]
