"""Building and unit ORM models."""

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from buildops.models import Base, BaseModel


class Building(Base, BaseModel):
    """Model representing a managed building.

    ``current_operator_period_id`` is a cache of "the period row with status
    ACTIVE for this building". It is only written in the same transaction that
    flips period status (see ``OperatorPeriodStore.point_building_at``).

    ``current_management_id`` is the pre-continuity direct PM pointer. It is
    kept in sync with the active period (set for PM operators, cleared for HOA)
    so older reads keep working.
    """

    __tablename__ = "buildings"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    total_units: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    current_operator_period_id: Mapped[int | None] = mapped_column(
        ForeignKey(
            "operator_periods.id",
            use_alter=True,
            name="fk_buildings_current_operator_period_id",
            ondelete="SET NULL",
        ),
        nullable=True,
        comment="Cached id of the ACTIVE operator period",
    )
    current_management_id: Mapped[int | None] = mapped_column(
        ForeignKey("management_companies.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Legacy direct management company pointer",
    )

    # Relationships
    current_operator_period: Mapped["OperatorPeriod | None"] = relationship(  # noqa: F821
        "OperatorPeriod",
        foreign_keys=[current_operator_period_id],
        post_update=True,
    )
    operator_periods: Mapped[list["OperatorPeriod"]] = relationship(  # noqa: F821
        "OperatorPeriod",
        back_populates="building",
        foreign_keys="OperatorPeriod.building_id",
        order_by="OperatorPeriod.start_date",
        passive_deletes="all",
    )
    current_management: Mapped["ManagementCompany | None"] = relationship(  # noqa: F821
        "ManagementCompany",
        foreign_keys=[current_management_id],
    )
    units: Mapped[list["Unit"]] = relationship(
        "Unit",
        back_populates="building",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return (
            f"<Building(id={self.id}, name={self.name!r}, "
            f"current_operator_period_id={self.current_operator_period_id})>"
        )


class Unit(Base, BaseModel):
    """A rentable/ownable unit inside a building."""

    __tablename__ = "units"

    building_id: Mapped[int] = mapped_column(
        ForeignKey("buildings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    unit_number: Mapped[str] = mapped_column(String(20), nullable=False)
    floor: Mapped[int | None] = mapped_column(Integer, nullable=True)

    building: Mapped[Building] = relationship("Building", back_populates="units")

    __table_args__ = (UniqueConstraint("building_id", "unit_number", name="uq_units_building_number"),)

    def __repr__(self) -> str:
        return f"<Unit(id={self.id}, building_id={self.building_id}, unit_number={self.unit_number!r})>"


__all__ = ["Building", "Unit"]
