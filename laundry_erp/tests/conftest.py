"""
Pytest configuration and fixtures
"""
import itertools
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.engine import Engine
from laundry_erp.main import app
from laundry_erp.db.base import Base
from laundry_erp.db.init_db import seed_commission_rates
from laundry_erp.core.deps import get_db
from laundry_erp.core.security import create_access_token
from laundry_erp.models.employee import Employee, Role

# Import all models to ensure they're registered with Base.metadata
import laundry_erp.models  # noqa: F401


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
    seed_commission_rates(db)
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
def client(db):
    """Test client fixture with database override"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_employee(db):
    """Factory for employees; role defaults to produksi"""
    counter = itertools.count(1)

    def _make(role=Role.PRODUKSI, join_date=date(2024, 1, 15), base_salary=1500000, name=None, active=True):
        n = next(counter)
        employee = Employee(
            username=f"{role.value}{n}",
            name=name or f"{role.value.title()} {n}",
            role=role.value,
            join_date=join_date,
            base_salary=base_salary,
            active=active,
        )
        db.add(employee)
        db.commit()
        db.refresh(employee)
        return employee
    return _make


@pytest.fixture
def admin(make_employee):
    return make_employee(role=Role.ADMIN, name="Admin")


@pytest.fixture
def auth_headers():
    """Bearer header for an employee (there is no password login)"""
    def _headers(employee):
        token = create_access_token({"sub": str(employee.id)})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture(autouse=True)
def wita_offset(monkeypatch):
    """Pin the business calendar to WITA (+08:00) regardless of the environment"""
    from laundry_erp.core.config import settings
    monkeypatch.setattr(settings, "LOCAL_UTC_OFFSET_HOURS", 8)
