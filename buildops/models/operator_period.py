"""Operator period ORM model: the append-only ledger of who operated a building when."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import ClassVar

from sqlalchemy import CheckConstraint, ForeignKey, Index, Text, event, text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from buildops.models import Base, BaseModel, UTCDateTime


class OperatorType(str, Enum):
    """Kind of organization operating a building."""

    PM = "PM"
    HOA = "HOA"


class OperatorPeriodStatus(str, Enum):
    """Lifecycle status of an operator period.

    Transitions only ever produce ACTIVE and ENDED. TERMINATED and RENEWED are
    reserved for historical records entered by hand.
    """

    ACTIVE = "ACTIVE"
    PENDING = "PENDING"
    ENDED = "ENDED"
    TERMINATED = "TERMINATED"
    RENEWED = "RENEWED"


@dataclass(frozen=True)
class PMOperator:
    """A property-management company acting as operator."""

    organization_id: int
    operator_type: ClassVar[OperatorType] = OperatorType.PM


@dataclass(frozen=True)
class HOAOperator:
    """An HOA organization acting as operator."""

    organization_id: int
    operator_type: ClassVar[OperatorType] = OperatorType.HOA


Operator = PMOperator | HOAOperator


def operator_for(operator_type: OperatorType | str, organization_id: int) -> Operator:
    """Build the operator variant for a type tag and organization id."""
    operator_type = OperatorType(operator_type)
    if operator_type is OperatorType.PM:
        return PMOperator(organization_id)
    return HOAOperator(organization_id)


class OperatorPeriod(Base, BaseModel):
    """Model representing one time-bounded operator assignment for a building.

    Exactly one of ``management_company_id`` / ``hoa_organization_id`` is set,
    matching ``operator_type``. Both columns are written through the
    ``operator`` property so the pair can never disagree.

    ``end_date`` is null while the period is ACTIVE and is set exactly once
    when a later period supersedes it, to the successor's ``start_date``.
    """

    __tablename__ = "operator_periods"

    building_id: Mapped[int] = mapped_column(
        ForeignKey("buildings.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    operator_type: Mapped[OperatorType] = mapped_column(
        SQLEnum(OperatorType, native_enum=False, length=10),
        nullable=False,
    )
    management_company_id: Mapped[int | None] = mapped_column(
        ForeignKey("management_companies.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    hoa_organization_id: Mapped[int | None] = mapped_column(
        ForeignKey("hoa_organizations.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    start_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    status: Mapped[OperatorPeriodStatus] = mapped_column(
        SQLEnum(OperatorPeriodStatus, native_enum=False, length=20),
        nullable=False,
        default=OperatorPeriodStatus.ACTIVE,
        index=True,
    )
    handoff_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    building: Mapped["Building"] = relationship(  # noqa: F821
        "Building",
        back_populates="operator_periods",
        foreign_keys=[building_id],
    )
    management_company: Mapped["ManagementCompany | None"] = relationship(  # noqa: F821
        "ManagementCompany"
    )
    hoa_organization: Mapped["HoaOrganization | None"] = relationship(  # noqa: F821
        "HoaOrganization"
    )

    __table_args__ = (
        CheckConstraint(
            "(operator_type = 'PM' AND management_company_id IS NOT NULL "
            "AND hoa_organization_id IS NULL) OR "
            "(operator_type = 'HOA' AND hoa_organization_id IS NOT NULL "
            "AND management_company_id IS NULL)",
            name="ck_operator_periods_single_operator",
        ),
        CheckConstraint(
            "status <> 'ACTIVE' OR end_date IS NULL",
            name="ck_operator_periods_active_open",
        ),
        CheckConstraint(
            "end_date IS NULL OR end_date > start_date",
            name="ck_operator_periods_end_after_start",
        ),
        # At most one ACTIVE period per building
        Index(
            "uq_operator_periods_one_active",
            "building_id",
            unique=True,
            sqlite_where=text("status = 'ACTIVE'"),
            postgresql_where=text("status = 'ACTIVE'"),
        ),
        Index("ix_operator_periods_building_start", "building_id", "start_date"),
    )

    @property
    def operator(self) -> Operator:
        if self.operator_type == OperatorType.PM:
            return PMOperator(self.management_company_id)
        return HOAOperator(self.hoa_organization_id)

    @operator.setter
    def operator(self, value: Operator) -> None:
        self.operator_type = value.operator_type
        if isinstance(value, PMOperator):
            self.management_company_id = value.organization_id
            self.hoa_organization_id = None
        else:
            self.hoa_organization_id = value.organization_id
            self.management_company_id = None

    @property
    def operator_organization(self):
        """The ManagementCompany or HoaOrganization row behind this period."""
        if self.operator_type == OperatorType.PM:
            return self.management_company
        return self.hoa_organization

    @property
    def is_active(self) -> bool:
        return self.status == OperatorPeriodStatus.ACTIVE

    def __repr__(self) -> str:
        return (
            f"<OperatorPeriod(id={self.id}, building_id={self.building_id}, "
            f"operator={self.operator}, status={self.status}, "
            f"start_date={self.start_date}, end_date={self.end_date})>"
        )


@event.listens_for(OperatorPeriod, "before_delete")
def _refuse_period_delete(mapper, connection, target: OperatorPeriod) -> None:
    raise RuntimeError(
        f"Operator period {target.id} is part of the building history and cannot be deleted"
    )


__all__ = [
    "OperatorType",
    "OperatorPeriodStatus",
    "PMOperator",
    "HOAOperator",
    "Operator",
    "operator_for",
    "OperatorPeriod",
]
