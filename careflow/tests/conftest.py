"""
Pytest configuration and fixtures
"""
import os

# Settings are read at import time; give the suite a self-contained environment
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-careflow-test-suite")
os.environ.setdefault("APP_ENV", "local")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.engine import Engine
from careflow.main import app
from careflow.db.base import Base
from careflow.core.deps import get_db, get_role_mapping_cache
from careflow.core.security import create_access_token
from careflow.services.role_mapping_service import RoleMappingCache

# Import all models to ensure they're registered with Base.metadata
from careflow.models import (
    Employee,
    AuditLog,
    LeaveApprovalRule,
    LeaveRequest,
    RoleMapping,
    FailedSync,
)  # noqa


# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Enable foreign keys for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def role_cache():
    """A fresh role mapping cache per test so cached tables never leak between tests"""
    return RoleMappingCache()


@pytest.fixture(scope="function")
def client(db, role_cache):
    """Test client fixture with database and cache overrides"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_role_mapping_cache] = lambda: role_cache
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_token(sub="user-123", role=None, email="user@example.com", **claims):
    data = {"sub": sub, "email": email, **claims}
    if role is not None:
        data["role"] = role
    return create_access_token(data)


@pytest.fixture
def token_for():
    """Factory: token_for(sub=..., role=..., **claims) -> bearer token"""
    return make_token


@pytest.fixture
def auth_headers():
    """Bearer headers for an ordinary authenticated user"""
    return {"Authorization": f"Bearer {make_token(role='carer')}"}


@pytest.fixture
def admin_headers():
    """Bearer headers for a rule administrator"""
    return {"Authorization": f"Bearer {make_token(sub='admin-1', role='admin')}"}


@pytest.fixture
def employee(db):
    """An employee that leave requests can reference"""
    emp = Employee(
        tenant_id=1,
        external_employee_id=501,
        first_name="Jane",
        last_name="Doe",
        email="jane.doe@carehome.co.uk",
        role="Carer",
        status="active",
    )
    db.add(emp)
    db.commit()
    db.refresh(emp)
    return emp
