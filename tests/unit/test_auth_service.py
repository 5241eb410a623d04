"""Unit tests for buildops.services.auth_service."""

import pytest

from buildops.models.user import UserRole
from buildops.services.auth_service import (
    ADMIN_ROLES,
    WRITE_ROLES,
    Principal,
    load_principal,
    require_role,
)
from buildops.services.errors import AuthError


class TestPrincipal:
    def test_from_user_copies_affiliation(self, manager_user, acme):
        principal = Principal.from_user(manager_user)

        assert principal.user_id == manager_user.id
        assert principal.role == UserRole.MANAGER
        assert principal.management_company_id == acme.id
        assert principal.hoa_organization_id is None

    @pytest.mark.parametrize("role", list(UserRole))
    def test_role_flags(self, role):
        principal = Principal(user_id=1, role=role)
        assert principal.is_administrator == (role in ADMIN_ROLES)


class TestRequireRole:
    def test_missing_principal_is_401(self):
        with pytest.raises(AuthError) as exc_info:
            require_role(None, WRITE_ROLES, "transition building operators")
        assert exc_info.value.http_status == 401
        assert exc_info.value.code == "AUTH_ERROR"

    def test_insufficient_role_is_403(self):
        principal = Principal(user_id=7, role=UserRole.TENANT)
        with pytest.raises(AuthError, match="transition building operators") as exc_info:
            require_role(principal, WRITE_ROLES, "transition building operators")
        assert exc_info.value.http_status == 403

    @pytest.mark.parametrize("role", [UserRole.MANAGER, UserRole.ADMIN, UserRole.SUPER_ADMIN])
    def test_write_roles_pass(self, role):
        require_role(Principal(user_id=1, role=role), WRITE_ROLES, "write")


class TestLoadPrincipal:
    def test_loads_active_user(self, db_session, admin_user):
        principal = load_principal(db_session, admin_user.id)
        assert principal.user_id == admin_user.id
        assert principal.is_administrator

    def test_no_user_id_is_401(self, db_session):
        with pytest.raises(AuthError) as exc_info:
            load_principal(db_session, None)
        assert exc_info.value.http_status == 401

    def test_unknown_user_is_401(self, db_session):
        with pytest.raises(AuthError) as exc_info:
            load_principal(db_session, 999)
        assert exc_info.value.http_status == 401

    def test_inactive_user_is_403(self, db_session, user_factory):
        user = user_factory(UserRole.MANAGER, "gone@acme.example", is_active=False)
        with pytest.raises(AuthError, match="inactive") as exc_info:
            load_principal(db_session, user.id)
        assert exc_info.value.http_status == 403
