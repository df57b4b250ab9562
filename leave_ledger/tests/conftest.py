"""
Pytest configuration and fixtures
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("APP_ENV", "local")

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from leave_ledger.main import app
from leave_ledger.db.base import Base
from leave_ledger.core.deps import get_db
from leave_ledger.services.holiday_calendar import (
    HolidayCalendar,
    SA_FIXED_HOLIDAYS,
    SA_VARIABLE_HOLIDAYS,
)
from leave_ledger.utils import datetime_utils

# Import all models to ensure they're registered with Base.metadata
from leave_ledger.models import LeaveBalance, LeaveRequest, LeaveTransaction  # noqa


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
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Test client fixture with database override"""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sa_calendar():
    """Fresh built-in South African calendar (warnings not shared between tests)"""
    return HolidayCalendar(SA_FIXED_HOLIDAYS, SA_VARIABLE_HOLIDAYS)


@pytest.fixture
def freeze_today(monkeypatch):
    """Pin the business date used wherever no explicit as_of is passed"""
    def _freeze(day: date) -> date:
        monkeypatch.setattr(datetime_utils, "today", lambda: day)
        return day
    return _freeze
