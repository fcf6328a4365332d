# salon/deps.py

from fastapi import Depends, HTTPException
from sqlmodel import Session

from salon.booking import BookingService
from salon.config import get_settings
from salon.db import get_session
from salon.repositories import (
    AppointmentRepository,
    ClientRepository,
    ServiceRepository,
    StaffRepository,
)
from salon.store import RecordStore, SQLRecordStore

STAFF_ROLES = ("manager", "receptionist", "stylist")
FRONT_DESK = ("manager", "receptionist")


def require_role(user: dict, *roles: str):
    if user["role"] not in roles:
        raise HTTPException(status_code=403, detail="Forbidden")


def get_store(session: Session = Depends(get_session)) -> RecordStore:
    return SQLRecordStore(session)


def get_booking(store: RecordStore = Depends(get_store)) -> BookingService:
    return BookingService(
        appointments=AppointmentRepository(store),
        clients=ClientRepository(store),
        services=ServiceRepository(store),
        staff=StaffRepository(store),
        settings=get_settings(),
    )
