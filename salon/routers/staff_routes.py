# salon/routers/staff_routes.py

from datetime import date, time
from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from salon.auth import get_current_user
from salon.booking import BookingService
from salon.core import normalize_schedule
from salon.deps import STAFF_ROLES, get_booking, get_store, require_role
from salon.errors import NotFound
from salon.repositories import StaffRepository
from salon.schemas import AvailabilityResponse, ScheduleIn, StaffCreate, StaffPublic, StaffUpdate
from salon.store import RecordStore

router = APIRouter(
    prefix="/staff",
    tags=["staff"],
)


@router.get("", response_model=List[StaffPublic])
def list_staff(
    role: Optional[str] = None,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *STAFF_ROLES)
    staff = StaffRepository(store)
    return staff.by_role(role) if role else staff.all()


@router.post("", response_model=StaffPublic, status_code=201)
def create_staff(
    member: StaffCreate,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "manager")
    record = member.model_dump()
    record["schedule"] = normalize_schedule(member.schedule)
    return StaffRepository(store).create(record)


# Declared before /{staff_id} so "available" is not read as an id
@router.get("/available", response_model=List[StaffPublic])
def available_staff(
    date: date,
    time: time,
    booking: BookingService = Depends(get_booking),
):
    return booking.available_staff(date, time)


@router.get("/{staff_id}", response_model=StaffPublic)
def get_staff(
    staff_id: int,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *STAFF_ROLES)
    return StaffRepository(store).get(staff_id)


@router.patch("/{staff_id}", response_model=StaffPublic)
def update_staff(
    staff_id: int,
    changes: StaffUpdate,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "manager")
    return StaffRepository(store).update(staff_id, changes.model_dump(exclude_unset=True))


@router.put("/{staff_id}/schedule", response_model=StaffPublic)
def set_schedule(
    staff_id: int,
    schedule: ScheduleIn,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "manager")
    return StaffRepository(store).update(staff_id, {"schedule": normalize_schedule(schedule)})


@router.delete("/{staff_id}", status_code=204)
def delete_staff(
    staff_id: int,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "manager")
    if not StaffRepository(store).delete(staff_id):
        raise NotFound(f"Staff member {staff_id} not found")
    return Response(status_code=204)


@router.get("/{staff_id}/availability", response_model=AvailabilityResponse)
def staff_availability(
    staff_id: int,
    date: date,
    service_id: int,
    booking: BookingService = Depends(get_booking),
):
    return {
        "staff_id": staff_id,
        "date": date,
        "available_starts": booking.open_slots(staff_id, date, service_id),
    }
