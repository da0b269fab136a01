"""Shared test fixtures for MediSlot tests."""

import os

# Configure before the application modules read the environment
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["PAYMENT_WEBHOOK_SECRET"] = "whsec-test"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

from datetime import date, timedelta  # noqa: E402
from typing import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from medislot.auth import Actor, actor_for_user  # noqa: E402
from medislot.database import Base, SessionLocal, engine, get_db  # noqa: E402
from medislot.domain.accounts.schemas import DoctorCreate, PatientCreate  # noqa: E402
from medislot.domain.accounts.service import AccountService  # noqa: E402
from medislot.main import app  # noqa: E402
from medislot.models import Doctor, Patient, Role, User  # noqa: E402
from medislot.security_utils import create_access_token  # noqa: E402


def next_weekday(weekday: int, after: date = None) -> date:
    """First date strictly after ``after`` (default today) with the given weekday (Monday=0)"""
    start = (after or date.today()) + timedelta(days=1)
    return start + timedelta(days=(weekday - start.weekday()) % 7)


def make_doctor(db: Session, email: str = "house@example.com", hourly_rate: float = 100.0) -> Doctor:
    return AccountService(db).create_doctor(
        DoctorCreate(
            name="Gregory House",
            email=email,
            specialization="Diagnostics",
            hourly_rate=hourly_rate,
        )
    )


def make_patient(db: Session, email: str = "jane@example.com", name: str = "Jane Doe") -> Patient:
    return AccountService(db).create_patient(PatientCreate(name=name, email=email))


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user.id})}"}


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Fresh in-memory schema per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def doctor(db) -> Doctor:
    return make_doctor(db)


@pytest.fixture
def patient(db) -> Patient:
    return make_patient(db)


@pytest.fixture
def other_patient(db) -> Patient:
    return make_patient(db, email="john@example.com", name="John Roe")


@pytest.fixture
def admin(db) -> User:
    user = User(name="Admin", email="admin@example.com", role=Role.ADMIN.value)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def patient_actor(patient) -> Actor:
    return actor_for_user(patient.user)


@pytest.fixture
def other_patient_actor(other_patient) -> Actor:
    return actor_for_user(other_patient.user)


@pytest.fixture
def doctor_actor(doctor) -> Actor:
    return actor_for_user(doctor.user)


@pytest.fixture
def admin_actor(admin) -> Actor:
    return actor_for_user(admin)


@pytest.fixture
def next_monday() -> date:
    return next_weekday(0)


@pytest.fixture
def client(db) -> Generator[TestClient, None, None]:
    """Test client whose requests use the per-test database."""

    def override_get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
