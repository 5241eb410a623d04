"""User ORM model with role and operator-organization affiliation."""

from enum import Enum

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from buildops.models import Base, BaseModel


class UserRole(str, Enum):
    """Role of a platform user."""

    TENANT = "TENANT"
    MAINTENANCE = "MAINTENANCE"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"
    BUILDING_OWNER = "BUILDING_OWNER"


class User(Base, BaseModel):
    """
    A person using the platform.

    Managers belong to either a management company or an HOA organization.
    That affiliation scopes which buildings they see in the portfolio view:
    only buildings whose active operator period names their organization.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, native_enum=False, length=20),
        nullable=False,
        default=UserRole.TENANT,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    management_company_id: Mapped[int | None] = mapped_column(
        ForeignKey("management_companies.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    hoa_organization_id: Mapped[int | None] = mapped_column(
        ForeignKey("hoa_organizations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    management_company: Mapped["ManagementCompany | None"] = relationship(  # noqa: F821
        "ManagementCompany"
    )
    hoa_organization: Mapped["HoaOrganization | None"] = relationship(  # noqa: F821
        "HoaOrganization"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r}, role={self.role})>"


__all__ = ["User", "UserRole"]
