"""Operator organization ORM models: management companies and HOA organizations."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from buildops.models import Base, BaseModel


class ManagementCompany(Base, BaseModel):
    """Property-management company that can operate buildings (operator type PM)."""

    __tablename__ = "management_companies"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Company display name",
    )
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<ManagementCompany(id={self.id}, name={self.name!r})>"


class HoaOrganization(Base, BaseModel):
    """Homeowner association that self-manages buildings (operator type HOA)."""

    __tablename__ = "hoa_organizations"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Association display name",
    )
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<HoaOrganization(id={self.id}, name={self.name!r})>"


__all__ = ["ManagementCompany", "HoaOrganization"]
