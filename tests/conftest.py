import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-carbonly")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from app.database import get_db
from app.models.base import Base
from app.config import settings
from app.core.security import create_access_token
# Import all model classes to ensure they're registered with SQLAlchemy
from app.models.organization import Organization
from app.models.user import User
from app.models.business_unit import BusinessUnit
from app.models.emission import Emission  # noqa: F401
from app.models.invitation import Invitation  # noqa: F401
from app.models.role import UserRole
# Import FastAPI app AFTER model imports
from app.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """FastAPI test client with test database"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(user_id="1", expired: bool = False, organization_id: int = 1) -> str:
    """
    Generate JWT token for testing.

    Args:
        user_id: User ID to embed in 'sub' claim
        expired: If True, create expired token
        organization_id: Organization ID to embed in 'org' claim

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": str(user_id), "org": organization_id, "exp": exp, "iat": datetime.now(UTC)}

    token = jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")
    return token


def headers_for(user: User) -> dict:
    """Authorization headers for a persisted user"""
    token = create_access_token(user.id, user.organization_id)
    return {"Authorization": f"Bearer {token}"}


def create_user(
    db_session,
    organization: Organization,
    role: UserRole,
    email: str,
    business_unit: BusinessUnit | None = None,
) -> User:
    """Persist a user without a password"""
    user = User(
        organization_id=organization.id,
        username=email.split("@")[0],
        email=email,
        role=role,
        business_unit_id=business_unit.id if business_unit else None,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def organization(db_session):
    """Organization under test"""
    org = Organization(name="Acme Manufacturing", slug="acme")
    db_session.add(org)
    db_session.commit()
    db_session.refresh(org)
    return org


@pytest.fixture
def other_organization(db_session):
    """Second organization for isolation tests"""
    org = Organization(name="Globex", slug="globex")
    db_session.add(org)
    db_session.commit()
    db_session.refresh(org)
    return org


def _create_unit(db_session, organization, name):
    unit = BusinessUnit(organization_id=organization.id, name=name)
    db_session.add(unit)
    db_session.commit()
    db_session.refresh(unit)
    return unit


@pytest.fixture
def plant_unit(db_session, organization):
    """Home unit of the manager, team member and auditor"""
    return _create_unit(db_session, organization, "Plant")


@pytest.fixture
def logistics_unit(db_session, organization):
    """Unit delegated to the manager via manager_id"""
    return _create_unit(db_session, organization, "Logistics")


@pytest.fixture
def retail_unit(db_session, organization):
    """Unit nobody except admins can reach"""
    return _create_unit(db_session, organization, "Retail")


@pytest.fixture
def foreign_unit(db_session, other_organization):
    """Unit owned by another organization"""
    return _create_unit(db_session, other_organization, "Globex HQ")


@pytest.fixture
def admin_user(db_session, organization):
    return create_user(db_session, organization, UserRole.ADMIN, "admin@acme.test")


@pytest.fixture
def manager_user(db_session, organization, plant_unit, logistics_unit):
    user = create_user(
        db_session, organization, UserRole.BUSINESS_UNIT_MANAGER, "manager@acme.test", plant_unit
    )
    logistics_unit.manager_id = user.id
    db_session.commit()
    return user


@pytest.fixture
def team_member_user(db_session, organization, plant_unit):
    return create_user(
        db_session, organization, UserRole.TEAM_MEMBER, "member@acme.test", plant_unit
    )


@pytest.fixture
def auditor_user(db_session, organization, plant_unit):
    return create_user(db_session, organization, UserRole.AUDITOR, "auditor@acme.test", plant_unit)


@pytest.fixture
def foreign_admin_user(db_session, other_organization):
    return create_user(db_session, other_organization, UserRole.ADMIN, "admin@globex.test")


@pytest.fixture
def admin_headers(admin_user):
    return headers_for(admin_user)


@pytest.fixture
def manager_headers(manager_user):
    return headers_for(manager_user)


@pytest.fixture
def team_member_headers(team_member_user):
    return headers_for(team_member_user)


@pytest.fixture
def auditor_headers(auditor_user):
    return headers_for(auditor_user)
