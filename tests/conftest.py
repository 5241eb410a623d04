"""Pytest configuration and shared fixtures."""

import os
from pathlib import Path

# Set test database URL BEFORE any imports from buildops
# This keeps the module-level engine off the developer database
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402
from alembic.config import Config  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

import buildops.migrations  # noqa: E402
from buildops.main import app  # noqa: E402
from buildops.models import Base  # noqa: E402
from buildops.models.building import Building, Unit  # noqa: E402
from buildops.models.operator_period import OperatorType  # noqa: E402
from buildops.models.organization import HoaOrganization, ManagementCompany  # noqa: E402
from buildops.models.user import User, UserRole  # noqa: E402
from buildops.services import build_engine, get_db  # noqa: E402
from buildops.services.auth_service import Principal  # noqa: E402
from buildops.services.transition_service import OperatorTransitionService  # noqa: E402

JAN_1 = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def db_session():
    """Provide a session on a fresh in-memory database with all tables created."""
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture
def migration_config(tmp_path) -> Config:
    """Alembic config for a fresh SQLite file, independent of alembic.ini."""
    config = Config()
    config.set_main_option("script_location", str(Path(buildops.migrations.__file__).parent))
    config.set_main_option("sqlalchemy.url", f"sqlite:///{tmp_path / 'migrated.db'}")
    return config


@pytest.fixture
def client(db_session):
    """Provide a FastAPI test client bound to the test session."""

    def override_get_db():
        """Override get_db to use test session."""
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Organizations and users
# ---------------------------------------------------------------------------


@pytest.fixture
def acme(db_session) -> ManagementCompany:
    company = ManagementCompany(name="Acme Property Management", email="ops@acme.example")
    db_session.add(company)
    db_session.commit()
    return company


@pytest.fixture
def northside(db_session) -> ManagementCompany:
    company = ManagementCompany(name="Northside Realty")
    db_session.add(company)
    db_session.commit()
    return company


@pytest.fixture
def hoa(db_session) -> HoaOrganization:
    association = HoaOrganization(name="Maple Court Owners Association")
    db_session.add(association)
    db_session.commit()
    return association


def make_user(db_session, role: UserRole, email: str, **kwargs) -> User:
    user = User(name=email.split("@")[0].title(), email=email, role=role, **kwargs)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def admin_user(db_session) -> User:
    return make_user(db_session, UserRole.ADMIN, "admin@buildops.example")


@pytest.fixture
def manager_user(db_session, acme) -> User:
    return make_user(
        db_session, UserRole.MANAGER, "manager@acme.example", management_company_id=acme.id
    )


@pytest.fixture
def hoa_manager_user(db_session, hoa) -> User:
    return make_user(
        db_session, UserRole.MANAGER, "board@maple.example", hoa_organization_id=hoa.id
    )


@pytest.fixture
def tenant_user(db_session) -> User:
    return make_user(db_session, UserRole.TENANT, "tenant@tenant.example")


@pytest.fixture
def admin(admin_user) -> Principal:
    return Principal.from_user(admin_user)


@pytest.fixture
def manager(manager_user) -> Principal:
    return Principal.from_user(manager_user)


@pytest.fixture
def tenant(tenant_user) -> Principal:
    return Principal.from_user(tenant_user)


@pytest.fixture
def user_factory(db_session):
    """Create users with a given role: ``user_factory(UserRole.MANAGER, "a@b.example")``."""

    def _make(role: UserRole, email: str, **kwargs) -> User:
        return make_user(db_session, role, email, **kwargs)

    return _make


# ---------------------------------------------------------------------------
# Buildings
# ---------------------------------------------------------------------------


@pytest.fixture
def building(db_session) -> Building:
    """A building with two units and no operator yet."""
    new_building = Building(name="Maple Court", address="400 Maple Avenue", total_units=2)
    db_session.add(new_building)
    db_session.flush()
    db_session.add_all(
        [
            Unit(building_id=new_building.id, unit_number="1A"),
            Unit(building_id=new_building.id, unit_number="1B"),
        ]
    )
    db_session.commit()
    return new_building


@pytest.fixture
def managed_building(db_session, building, acme) -> Building:
    """``building`` with Acme as ACTIVE PM operator since 2024-01-01."""
    OperatorTransitionService(db_session).transition(
        building_id=building.id,
        from_operator_period_id=None,
        to_operator_type=OperatorType.PM,
        to_operator_id=acme.id,
        effective_date=JAN_1,
    )
    return building
