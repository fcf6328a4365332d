# salon/booking.py
"""Service for booking, rescheduling and moving appointments through their lifecycle"""

import logging
from datetime import date, time, timedelta
from typing import Dict, List, Mapping, Optional, Tuple

from salon import core
from salon.config import Settings, get_settings
from salon.errors import DuplicateRecord, SchedulingConflict, ServiceNotFound, ValidationError
from salon.models import Appointment, utcnow
from salon.repositories import (
    AppointmentRepository,
    ClientRepository,
    ServiceRepository,
    StaffRepository,
)

logger = logging.getLogger(__name__)

SCHEDULING_FIELDS = ("client_id", "staff_id", "service_id", "date", "start_time")
EDITABLE_FIELDS = SCHEDULING_FIELDS + ("notes",)
OPENING_STATUSES = ("pending", "confirmed")


class BookingService:
    """Handles appointment operations on top of injected repositories"""

    def __init__(
        self,
        appointments: AppointmentRepository,
        clients: ClientRepository,
        services: ServiceRepository,
        staff: StaffRepository,
        settings: Optional[Settings] = None,
    ):
        self.appointments = appointments
        self.clients = clients
        self.services = services
        self.staff = staff
        self.settings = settings or get_settings()

    def _can_overlap(self, actor_role: Optional[str], allow_overlap: bool) -> bool:
        if not allow_overlap:
            return False
        if self.settings.ALLOW_DOUBLE_BOOKING:
            return True
        return actor_role is not None and actor_role in self.settings.DOUBLE_BOOKING_ROLES

    def _resolve(self, data: Mapping) -> Tuple[time, time]:
        # 1) Referenced records must exist
        self.clients.get(data["client_id"])
        staff = self.staff.get(data["staff_id"])

        # 2) Derive the end time from the service duration
        start = core.parse_time(data["start_time"])
        end = core.end_time(start, data["service_id"], self.services.catalog())

        # 3) Stay inside the staff member's working hours
        if self.settings.ENFORCE_WORKING_HOURS:
            window = core.window_for(staff, data["date"])
            if window is None:
                raise ValidationError(
                    f"{staff.name} is not scheduled to work on {core.weekday_name(data['date']).title()}"
                )
            if not core.within_window(start, end, window):
                raise ValidationError("Appointment must be within working hours")
        return start, end

    def _check_conflicts(self, candidate: Appointment, actor_role: Optional[str], allow_overlap: bool) -> bool:
        """Raise SchedulingConflict, or return True when an overlap was allowed through"""
        existing = self.appointments.for_staff_on(candidate.staff_id, candidate.date)
        conflicts = core.find_conflicts(candidate, existing)
        if not conflicts:
            return False

        ids = [a.id for a in conflicts]
        if self._can_overlap(actor_role, allow_overlap):
            logger.warning(f"Double-booking staff {candidate.staff_id} on {candidate.date} over {ids}")
            return True

        logger.info(f"Rejected booking for staff {candidate.staff_id} on {candidate.date}: overlaps {ids}")
        raise SchedulingConflict(
            f"Staff member {candidate.staff_id} already has an appointment at that time",
            ids,
        )

    def book(self, data: Mapping, actor_role: Optional[str] = None, allow_overlap: bool = False) -> Appointment:
        status = getattr(data.get("status"), "value", data.get("status")) or "pending"
        if status not in OPENING_STATUSES:
            raise ValidationError("New appointments must be pending or confirmed")

        for field in SCHEDULING_FIELDS:
            if data.get(field) is None:
                raise ValidationError(f"Missing required field '{field}'")

        start, end = self._resolve(data)
        record = {
            "client_id": data["client_id"],
            "staff_id": data["staff_id"],
            "service_id": data["service_id"],
            "date": data["date"],
            "start_time": start,
            "end_time": end,
            "status": status,
            "notes": data.get("notes"),
        }
        overlapping = self._check_conflicts(Appointment(**record), actor_role, allow_overlap)
        record["exclusive"] = None if overlapping else True

        try:
            appointment = self.appointments.create(record)
        except DuplicateRecord:
            raise SchedulingConflict("Staff member already has an appointment starting at that time")

        logger.info(
            f"Booked appointment {appointment.id} for staff {appointment.staff_id} "
            f"on {appointment.date} {start:%H:%M}-{end:%H:%M}"
        )
        return appointment

    def reschedule(
        self,
        appointment_id: int,
        changes: Mapping,
        actor_role: Optional[str] = None,
        allow_overlap: bool = False,
    ) -> Appointment:
        if "status" in changes:
            raise ValidationError("Status changes go through the status transition")
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot edit field(s): {', '.join(sorted(unknown))}")

        current = self.appointments.get(appointment_id)
        changes = {k: v for k, v in changes.items() if v is not None}
        record = dict(changes)

        if any(field in changes for field in SCHEDULING_FIELDS):
            if current.status not in OPENING_STATUSES:
                raise ValidationError(f"A {current.status} appointment cannot be rescheduled")
            merged = current.model_dump()
            merged.update(changes)
            start, end = self._resolve(merged)
            merged.update(start_time=start, end_time=end)
            record.update(start_time=start, end_time=end)
            overlapping = self._check_conflicts(Appointment(**merged), actor_role, allow_overlap)
            record["exclusive"] = None if overlapping else True

        record["updated_at"] = utcnow()
        try:
            appointment = self.appointments.update(appointment_id, record)
        except DuplicateRecord:
            raise SchedulingConflict("Staff member already has an appointment starting at that time")

        logger.info(f"Updated appointment {appointment_id}: {sorted(changes)}")
        return appointment

    def change_status(self, appointment_id: int, status) -> Appointment:
        current = self.appointments.get(appointment_id)
        core.check_transition(current.status, status)
        new_status = getattr(status, "value", status)
        appointment = self.appointments.update(
            appointment_id, {"status": new_status, "updated_at": utcnow()}
        )
        logger.info(f"Appointment {appointment_id}: {current.status} -> {new_status}")
        return appointment

    def cancel(self, appointment_id: int) -> Appointment:
        return self.change_status(appointment_id, "cancelled")

    def remove(self, appointment_id: int) -> None:
        self.appointments.get(appointment_id)
        self.appointments.delete(appointment_id)
        logger.info(f"Deleted appointment {appointment_id}")

    def week(self, ref: date, staff_id: Optional[int] = None) -> Tuple[date, Dict[int, List[Appointment]]]:
        start = core.week_start(ref)
        appointments = self.appointments.in_range(start, start + timedelta(days=6), staff_id=staff_id)
        return start, core.bucket_by_day(appointments, start)

    def available_staff(self, day: date, at: time) -> List:
        return core.available_staff(day, at, self.staff.all(), self.appointments.find(date=day))

    def open_slots(self, staff_id: int, day: date, service_id: int) -> List[str]:
        staff = self.staff.get(staff_id)
        service = self.services.catalog().get(service_id)
        if service is None:
            raise ServiceNotFound(service_id)
        return core.open_slots(
            staff,
            day,
            service.duration,
            self.appointments.for_staff_on(staff_id, day),
            self.settings.SLOT_MINUTES,
        )
