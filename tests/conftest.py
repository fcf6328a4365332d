from datetime import date, time

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from salon.booking import BookingService
from salon.config import Settings
from salon.db import create_tables, get_session
from salon.main import app
from salon.models import Appointment
from salon.repositories import (
    AppointmentRepository,
    ClientRepository,
    ServiceRepository,
    StaffRepository,
)
from salon.store import MemoryRecordStore

MONDAY = date(2024, 6, 3)
TUESDAY = date(2024, 6, 4)
WEDNESDAY = date(2024, 6, 5)
SUNDAY = date(2024, 6, 9)

TUESDAY_SCHEDULE = {
    "monday": "off",
    "tuesday": ["09:00", "17:00"],
    "wednesday": ["12:00", "20:00"],
}


def make_appointment(id=None, staff_id=1, day=TUESDAY, start="09:00", end="09:30", status="pending", **extra):
    h1, m1 = map(int, start.split(":"))
    h2, m2 = map(int, end.split(":"))
    return Appointment(
        id=id,
        client_id=extra.pop("client_id", 1),
        service_id=extra.pop("service_id", 1),
        staff_id=staff_id,
        date=day,
        start_time=time(h1, m1),
        end_time=time(h2, m2),
        status=status,
        **extra,
    )


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def memory_store():
    return MemoryRecordStore()


@pytest.fixture
def booking(memory_store, settings):
    return BookingService(
        appointments=AppointmentRepository(memory_store),
        clients=ClientRepository(memory_store),
        services=ServiceRepository(memory_store),
        staff=StaffRepository(memory_store),
        settings=settings,
    )


@pytest.fixture
def salon(booking):
    """One client, one stylist working Tuesdays 09:00-17:00, two services."""
    client = booking.clients.create({"name": "Ada Lovelace", "email": "ada@example.com", "phone": "555-0101"})
    stylist = booking.staff.create({"name": "Sam", "role": "stylist", "schedule": TUESDAY_SCHEDULE})
    trim = booking.services.create({"name": "Trim", "category": "Hair", "price": 30.0, "duration": 30})
    colour = booking.services.create({"name": "Colour", "category": "Hair", "price": 90.0, "duration": 60})
    return {"client": client, "stylist": stylist, "trim": trim, "colour": colour}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    """Create a user with the given role and return bearer headers for it."""

    def _login(role="manager", email=None, password="s3cret-pass"):
        email = email or f"{role}@salon.test"
        resp = client.post("/users", json={"email": email, "password": password, "role": role})
        assert resp.status_code == 201, resp.text
        resp = client.post("/auth/login", data={"username": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}

    return _login
