# tests/conftest.py
import os

# must be set before config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("EMAIL_ENABLED", "false")
os.environ.setdefault("LEASE_EXPIRY_JOB_ENABLED", "false")

from decimal import Decimal
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.init import Base, get_db
from database.models import RentalRequest, Unit, User
from enums.rental_request_status import RentalRequestStatus
from enums.unit_status import UnitStatus
from enums.unit_type import UnitType
from enums.user_role import UserRole
from schemas.rental_request_schema import RentalRequestCreate
from utils.dependencies import create_access_token

_sequence = count(1)


def applicant_payload(unit_id: int, **overrides) -> dict:
    """Booking form contents as the client sends them."""
    payload = {
        "unit_id": unit_id,
        "lease_duration_months": 12,
        "first_name": "Test",
        "last_name": "Applicant",
        "email": "applicant@example.com",
        "phone": "0812345678",
        "occupation": "Engineer",
        "emergency_contact": "Next Of Kin",
        "emergency_phone": "0898765432",
    }
    payload.update(overrides)
    return payload


def rental_request_in(unit_id: int, **overrides) -> RentalRequestCreate:
    return RentalRequestCreate(**applicant_payload(unit_id, **overrides))


@pytest.fixture
def session_factory():
    """
    - SQLite in-memory (StaticPool), app and test share one engine
    - all tables created from Base.metadata
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    try:
        yield TestingSessionLocal
    finally:
        engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    from main import app

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make_user(role: UserRole = UserRole.USER, **overrides) -> User:
        n = next(_sequence)
        values = {
            "name": f"User {n}",
            "email": f"user{n}@example.com",
            "hashed_password": "not-a-real-hash",
            "is_active": True,
            "role": role,
        }
        values.update(overrides)
        user = User(**values)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_unit(db):
    def _make_unit(status: UnitStatus = UnitStatus.AVAILABLE, **overrides) -> Unit:
        n = next(_sequence)
        values = {
            "room_number": f"{100 + n}",
            "floor": 1,
            "unit_type": UnitType.STUDIO,
            "rent_amount": Decimal("4500.00"),
            "status": status,
        }
        values.update(overrides)
        unit = Unit(**values)
        db.add(unit)
        db.commit()
        db.refresh(unit)
        return unit

    return _make_unit


@pytest.fixture
def admin(make_user):
    return make_user(role=UserRole.ADMIN)


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": user.email})
    return {"Authorization": f"Bearer {token}"}


def pending_count(db, user_id: int) -> int:
    db.expire_all()
    return (
        db.query(RentalRequest)
        .filter(RentalRequest.user_id == user_id, RentalRequest.status == RentalRequestStatus.PENDING)
        .count()
    )
