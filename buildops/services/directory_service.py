"""Organization directory: lookups for operator organizations."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from buildops.models.operator_period import Operator, OperatorType, operator_for
from buildops.models.organization import HoaOrganization, ManagementCompany
from buildops.services.errors import NotFoundError, ValidationFailedError


class DirectoryService:
    """Existence and name lookups for management companies and HOA organizations."""

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session

    def get_management_company(self, company_id: int) -> ManagementCompany | None:
        return self.db.get(ManagementCompany, company_id)

    def get_hoa_organization(self, hoa_id: int) -> HoaOrganization | None:
        return self.db.get(HoaOrganization, hoa_id)

    def list_management_companies(self) -> list[ManagementCompany]:
        return list(
            self.db.execute(select(ManagementCompany).order_by(ManagementCompany.name)).scalars()
        )

    def list_hoa_organizations(self) -> list[HoaOrganization]:
        return list(
            self.db.execute(select(HoaOrganization).order_by(HoaOrganization.name)).scalars()
        )

    def resolve_operator(
        self, operator_type: OperatorType | str, operator_id: int
    ) -> tuple[Operator, str]:
        """Validate that an operator organization of the given type exists.

        Args:
            operator_type: "PM" or "HOA"
            operator_id: Organization primary key

        Returns:
            (operator variant, organization display name)

        Raises:
            ValidationFailedError: If operator_type is not PM or HOA
            NotFoundError: If no organization of that type has this id
        """
        try:
            operator_type = OperatorType(operator_type)
        except ValueError as e:
            raise ValidationFailedError("operator type must be PM or HOA") from e

        if operator_type is OperatorType.PM:
            organization = self.get_management_company(operator_id)
            if organization is None:
                raise NotFoundError("Target management company not found")
        else:
            organization = self.get_hoa_organization(operator_id)
            if organization is None:
                raise NotFoundError("Target HOA organization not found")

        return operator_for(operator_type, organization.id), organization.name


__all__ = ["DirectoryService"]
