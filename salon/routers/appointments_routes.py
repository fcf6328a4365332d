# salon/routers/appointments_routes.py

from datetime import date, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from salon.auth import get_current_user
from salon.booking import BookingService
from salon.deps import FRONT_DESK, STAFF_ROLES, get_booking, require_role
from salon.errors import ValidationError
from salon.schemas import (
    AppointmentCreate,
    AppointmentPublic,
    AppointmentStatus,
    AppointmentUpdate,
    StatusChange,
    WeekResponse,
)

router = APIRouter(
    prefix="/appointments",
    tags=["appointments"],
)


@router.get("", response_model=List[AppointmentPublic])
def list_appointments(
    start: Optional[date] = None,
    end: Optional[date] = None,
    staff_id: Optional[int] = None,
    client_id: Optional[int] = None,
    status: Optional[AppointmentStatus] = None,
    booking: BookingService = Depends(get_booking),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *STAFF_ROLES)

    start = start or date.min
    end = end or date.max
    if start > end:
        raise ValidationError("start must not be after end")

    appointments = booking.appointments.in_range(
        start,
        end,
        staff_id=staff_id,
        client_id=client_id,
        status=status.value if status else None,
    )
    return sorted(appointments, key=lambda a: (a.date, a.start_time, a.id))


@router.post("", response_model=AppointmentPublic, status_code=201)
def create_appointment(
    appt: AppointmentCreate,
    allow_overlap: bool = False,
    booking: BookingService = Depends(get_booking),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *FRONT_DESK)
    return booking.book(appt.model_dump(), actor_role=current_user["role"], allow_overlap=allow_overlap)


# Declared before /{appt_id} so "week" is not read as an id
@router.get("/week", response_model=WeekResponse)
def week_view(
    date: date,
    staff_id: Optional[int] = None,
    booking: BookingService = Depends(get_booking),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *STAFF_ROLES)
    start, days = booking.week(date, staff_id=staff_id)
    return {"week_start": start, "days": days}


@router.get("/{appt_id}", response_model=AppointmentPublic)
def get_appointment(
    appt_id: int,
    booking: BookingService = Depends(get_booking),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *STAFF_ROLES)
    return booking.appointments.get(appt_id)


@router.patch("/{appt_id}", response_model=AppointmentPublic)
def update_appointment(
    appt_id: int,
    changes: AppointmentUpdate,
    allow_overlap: bool = False,
    booking: BookingService = Depends(get_booking),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *FRONT_DESK)
    return booking.reschedule(
        appt_id,
        changes.model_dump(exclude_unset=True),
        actor_role=current_user["role"],
        allow_overlap=allow_overlap,
    )


@router.post("/{appt_id}/status", response_model=AppointmentPublic)
def change_status(
    appt_id: int,
    change: StatusChange,
    booking: BookingService = Depends(get_booking),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *STAFF_ROLES)
    return booking.change_status(appt_id, change.status)


@router.patch("/{appt_id}/cancel", response_model=AppointmentPublic)
def cancel_appointment(
    appt_id: int,
    booking: BookingService = Depends(get_booking),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *STAFF_ROLES)
    return booking.cancel(appt_id)


@router.delete("/{appt_id}", status_code=204)
def delete_appointment(
    appt_id: int,
    booking: BookingService = Depends(get_booking),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *FRONT_DESK)
    booking.remove(appt_id)
    return Response(status_code=204)
