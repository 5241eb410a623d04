"""Acting principal and role checks for operator continuity operations.

Identity verification (passwords, tokens) happens upstream; this module only
describes who is acting and what their role allows.
"""

import logging
from dataclasses import dataclass

from fastapi import status
from sqlalchemy.orm import Session

from buildops.models.user import User, UserRole
from buildops.services.errors import AuthError

logger = logging.getLogger(__name__)

# Roles allowed to change operator assignments or dispatch work orders
WRITE_ROLES = frozenset({UserRole.MANAGER, UserRole.ADMIN, UserRole.SUPER_ADMIN})

# Roles that see every building regardless of operator affiliation
ADMIN_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPER_ADMIN})


@dataclass(frozen=True)
class Principal:
    """The acting user, with role and operator-organization affiliation."""

    user_id: int
    role: UserRole
    management_company_id: int | None = None
    hoa_organization_id: int | None = None

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            user_id=user.id,
            role=UserRole(user.role),
            management_company_id=user.management_company_id,
            hoa_organization_id=user.hoa_organization_id,
        )

    @property
    def is_administrator(self) -> bool:
        return self.role in ADMIN_ROLES


def require_role(principal: Principal | None, roles: frozenset[UserRole], action: str) -> None:
    """Raise AuthError unless ``principal`` holds one of ``roles``.

    Args:
        principal: Acting principal (None means unauthenticated)
        roles: Roles allowed to perform ``action``
        action: Short description used in the error message

    Raises:
        AuthError: 401 when unauthenticated, 403 when the role is insufficient
    """
    if principal is None:
        raise AuthError("Authentication required", status.HTTP_401_UNAUTHORIZED)
    if principal.role not in roles:
        logger.warning(
            "Denied %s for user_id=%d role=%s", action, principal.user_id, principal.role.value
        )
        raise AuthError(f"Insufficient permissions to {action}")


def load_principal(db: Session, user_id: int | None) -> Principal:
    """Resolve the acting user into a Principal.

    Raises:
        AuthError: 401 if no/unknown user, 403 if the user is deactivated
    """
    if user_id is None:
        raise AuthError("Authentication required", status.HTTP_401_UNAUTHORIZED)

    user = db.get(User, user_id)
    if user is None:
        raise AuthError("Authenticated user not found", status.HTTP_401_UNAUTHORIZED)
    if not user.is_active:
        raise AuthError("User account is inactive")

    return Principal.from_user(user)


__all__ = [
    "ADMIN_ROLES",
    "WRITE_ROLES",
    "Principal",
    "require_role",
    "load_principal",
]
