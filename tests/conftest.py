"""Shared test fixtures."""
import os

# Must be set before clinic_app.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clinic_app.auth import create_access_token
from clinic_app.constants import Role
from clinic_app.database import Base, get_db
from clinic_app.main import app
from clinic_app.models import Patient, User


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def _add(db, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def doctor(db) -> User:
    return _add(db, User(email="dr.house@clinic.test", name="Dr. House", role=Role.DOCTOR.value))


@pytest.fixture
def other_doctor(db) -> User:
    return _add(db, User(email="dr.grey@clinic.test", name="Dr. Grey", role=Role.DOCTOR.value))


@pytest.fixture
def receptionist(db) -> User:
    return _add(db, User(email="desk@clinic.test", name="Front Desk", role=Role.RECEPTIONIST.value))


@pytest.fixture
def patient_user(db) -> User:
    return _add(db, User(email="ana@clinic.test", name="Ana Silva", role=Role.PATIENT.value))


@pytest.fixture
def patient(db, patient_user) -> Patient:
    """Patient record owned by patient_user."""
    return _add(db, Patient(name="Ana Silva", contact="+15550000001", created_by=patient_user.id))


@pytest.fixture
def other_patient(db) -> Patient:
    return _add(db, Patient(name="Ben Okoro", contact="+15550000002"))


@pytest.fixture
def client(session_factory):
    """API client bound to the test database."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build a bearer header for a user."""
    def _create(user: User) -> dict:
        token = create_access_token(user.id, Role(user.role))
        return {"Authorization": f"Bearer {token}"}
    return _create
