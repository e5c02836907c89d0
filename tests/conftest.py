"""
Pytest configuration and shared fixtures.
"""

import os

# Set required environment variables BEFORE importing app modules
os.environ.setdefault("SQLALCHEMY_DATABASE_URI", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")
os.environ.setdefault("DEFAULT_TIMEZONE", "UTC")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from guthealth.api import deps
from guthealth.core.security import create_access_token
from guthealth.db.base import Base
from guthealth.main import app
from guthealth.models import HealthRecord, User
from guthealth.utils.timezone import to_local_date, utcnow


# In-memory SQLite shared by every connection
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def db():
    """Fresh schema and session per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[deps.get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _make_user(db, email, nickname):
    user = User(email=email, nickname=nickname)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db):
    return _make_user(db, "alice@example.com", "alice")


@pytest.fixture
def other_user(db):
    return _make_user(db, "bob@example.com", "bob")


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def other_headers(other_user):
    return {"Authorization": f"Bearer {create_access_token(other_user.id)}"}


@pytest.fixture
def make_record(db):
    """Factory for stored records; defaults describe a healthy movement logged now."""

    def _make(user, record_time: datetime = None, **overrides):
        record_time = record_time or utcnow()
        values = {
            "shape": "type_4",
            "color": "brown",
            "feeling": "normal",
            "frequency": 1,
            "has_blood": False,
            "has_pus": False,
            "has_mucus": False,
        }
        values.update(overrides)
        record = HealthRecord(
            user_id=user.id,
            record_time=record_time,
            record_date=to_local_date(record_time),
            **values,
        )
        db.add(record)
        db.commit()
        db.refresh(record)
        return record

    return _make
