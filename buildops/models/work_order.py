"""Work order ORM model."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import ForeignKey, Index, Numeric, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from buildops.models import Base, BaseModel, UTCDateTime
from buildops.models.issue import guard_attribution


class WorkOrderStatus(str, Enum):
    PENDING = "PENDING"
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    ON_HOLD = "ON_HOLD"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class WorkOrderPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class WorkOrder(Base, BaseModel):
    """Work order dispatched for a building, optionally following up an issue.

    A work order raised from an issue carries the issue's operator period, not
    the building's current one, so follow-up work stays with the operator that
    received the original report.
    """

    __tablename__ = "work_orders"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[WorkOrderPriority] = mapped_column(
        SQLEnum(WorkOrderPriority, native_enum=False, length=10),
        nullable=False,
        default=WorkOrderPriority.MEDIUM,
    )
    status: Mapped[WorkOrderStatus] = mapped_column(
        SQLEnum(WorkOrderStatus, native_enum=False, length=20),
        nullable=False,
        default=WorkOrderStatus.PENDING,
    )

    issue_id: Mapped[int | None] = mapped_column(
        ForeignKey("issues.id", ondelete="SET NULL"), nullable=True, index=True
    )
    building_id: Mapped[int] = mapped_column(
        ForeignKey("buildings.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    unit_id: Mapped[int | None] = mapped_column(
        ForeignKey("units.id", ondelete="SET NULL"), nullable=True
    )
    assigned_to_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    operator_period_id: Mapped[int | None] = mapped_column(
        ForeignKey("operator_periods.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
        comment="Operator period the work order is attributed to",
    )
    scheduled_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    completed_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    estimated_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    issue: Mapped["Issue | None"] = relationship(  # noqa: F821
        "Issue", back_populates="work_orders"
    )
    building: Mapped["Building"] = relationship("Building")  # noqa: F821
    operator_period: Mapped["OperatorPeriod | None"] = relationship(  # noqa: F821
        "OperatorPeriod"
    )

    __table_args__ = (
        Index("ix_work_orders_building_period", "building_id", "operator_period_id"),
    )

    @validates("operator_period_id")
    def _validate_operator_period_id(self, key, value):
        return guard_attribution(self, value)

    def __repr__(self) -> str:
        return (
            f"<WorkOrder(id={self.id}, building_id={self.building_id}, issue_id={self.issue_id}, "
            f"operator_period_id={self.operator_period_id}, status={self.status})>"
        )


__all__ = ["WorkOrder", "WorkOrderPriority", "WorkOrderStatus"]
