# salon/core.py
"""
Scheduling core: pure functions over appointments, staff schedules and the
service catalog. Nothing here touches the store.

Appointments are anything with ``id``, ``staff_id``, ``date``,
``start_time``, ``end_time`` and ``status``; staff members anything with
``id`` and a raw ``schedule`` mapping; services anything with ``duration``.
"""

from datetime import datetime, date, time, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from salon.errors import InvalidStatusTransition, ServiceNotFound, ValidationError

WEEKDAYS = [
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
]
OFF = "off"
CANCELLED = "cancelled"

Window = Tuple[time, time]

TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}


def _value(status) -> str:
    return getattr(status, "value", status)


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def parse_time(value) -> time:
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(str(value), fmt).time().replace(second=0)
        except ValueError:
            continue
    raise ValidationError(f"Malformed time '{value}', expected HH:MM")


def _weekday_key(key: str) -> str:
    key = str(key).strip().lower()
    for name in WEEKDAYS:
        if key == name or key == name[:3]:
            return name
    raise ValidationError(f"Unknown weekday '{key}'")


def parse_schedule(raw: Optional[Mapping]) -> Dict[str, Optional[Window]]:
    """
    Parse a stored schedule into ``{weekday: (start, end) | None}``.

    Days that are missing or marked "off" map to ``None``.
    """
    parsed: Dict[str, Optional[Window]] = {name: None for name in WEEKDAYS}
    for key, value in (raw or {}).items():
        day = _weekday_key(key)
        if value is None or (isinstance(value, str) and value.lower() == OFF):
            parsed[day] = None
            continue
        if isinstance(value, str) or len(value) != 2:
            raise ValidationError(f"Schedule for {day} must be 'off' or [start, end]")
        start, end = parse_time(value[0]), parse_time(value[1])
        if start >= end:
            raise ValidationError(f"Schedule for {day} must start before it ends")
        parsed[day] = (start, end)
    return parsed


def normalize_schedule(raw: Optional[Mapping]) -> Dict[str, object]:
    """Canonical storage form: full weekday names, "off" or ["HH:MM", "HH:MM"]."""
    normalized = {}
    for day, window in parse_schedule(raw).items():
        if window is None:
            normalized[day] = OFF
        else:
            normalized[day] = [window[0].strftime("%H:%M"), window[1].strftime("%H:%M")]
    return normalized


def window_for(staff, day: date) -> Optional[Window]:
    return parse_schedule(staff.schedule).get(weekday_name(day))


def end_time(start: time, service_id, catalog: Mapping) -> time:
    """
    End of an appointment starting at ``start`` for ``service_id``.

    Raises ServiceNotFound for an unknown service, and ValidationError when
    the duration is not positive or the end would fall on the next day
    (00:00 included).
    """
    service = catalog.get(service_id)
    if service is None:
        raise ServiceNotFound(service_id)
    if service.duration <= 0:
        raise ValidationError(f"Service {service_id} has a non-positive duration ({service.duration} minutes)")

    start = parse_time(start)
    start_dt = datetime.combine(date.min, start)
    end_dt = start_dt + timedelta(minutes=service.duration)
    if end_dt.date() != start_dt.date():
        raise ValidationError(
            f"Appointment starting at {start.strftime('%H:%M')} "
            f"with a {service.duration}-minute service would end after midnight"
        )
    return end_dt.time()


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    # half-open: [a_start, a_end) and [b_start, b_end)
    return a_start < b_end and b_start < a_end


def is_active(appointment) -> bool:
    return _value(appointment.status) != CANCELLED


def find_conflicts(candidate, existing: Iterable) -> List:
    if not is_active(candidate):
        return []

    conflicts = []
    for other in existing:
        if candidate.id is not None and other.id == candidate.id:
            continue
        if other.staff_id != candidate.staff_id or other.date != candidate.date:
            continue
        if not is_active(other):
            continue
        if overlaps(candidate.start_time, candidate.end_time, other.start_time, other.end_time):
            conflicts.append(other)
    return conflicts


def has_conflict(candidate, existing: Iterable) -> bool:
    return bool(find_conflicts(candidate, existing))


def within_window(start: time, end: time, window: Optional[Window]) -> bool:
    if window is None:
        return False
    return window[0] <= start and end <= window[1]


def available_staff(day: date, at: time, roster: Iterable, appointments: Optional[Iterable] = None) -> List:
    """
    Staff members scheduled to work at ``at`` on ``day``, in roster order.

    The window check is inclusive at both ends. When ``appointments`` is
    given, staff already busy at ``at`` are left out as well.
    """
    at = parse_time(at)
    busy = set()
    for appt in appointments or ():
        if appt.date == day and is_active(appt) and appt.start_time <= at < appt.end_time:
            busy.add(appt.staff_id)

    free = []
    for member in roster:
        window = window_for(member, day)
        if window is None:
            continue
        if not (window[0] <= at <= window[1]):
            continue
        if member.id in busy:
            continue
        free.append(member)
    return free


def open_slots(staff, day: date, duration: int, appointments: Iterable, slot_minutes: int = 15) -> List[str]:
    """Start times ("HH:MM") on the slot grid where a booking of ``duration`` fits."""
    window = window_for(staff, day)
    if window is None:
        return []

    work_start = datetime.combine(day, window[0])
    work_end = datetime.combine(day, window[1])
    slot_delta = timedelta(minutes=slot_minutes)
    length = timedelta(minutes=duration)

    booked = [
        (datetime.combine(day, a.start_time), datetime.combine(day, a.end_time))
        for a in appointments
        if a.staff_id == staff.id and a.date == day and is_active(a)
    ]

    available = []
    current = work_start
    while current + length <= work_end:
        slot_end = current + length
        if not any(overlaps(current, slot_end, start, end) for start, end in booked):
            available.append(current.time().strftime("%H:%M"))
        current += slot_delta
    return available


def week_start(ref: date) -> date:
    return ref - timedelta(days=ref.weekday())


def bucket_by_day(appointments: Iterable, start: date) -> Dict[int, List]:
    """
    Group appointments into the Monday-based week containing ``start``.

    Keys 1..7 are Monday..Sunday and are always present. Appointments
    outside the week are dropped; duplicates (same id) are kept once. Each
    day is ordered by start time, then id.
    """
    start = week_start(start)
    end = start + timedelta(days=7)
    buckets: Dict[int, List] = {day: [] for day in range(1, 8)}

    seen = set()
    for appt in appointments:
        if not (start <= appt.date < end):
            continue
        if appt.id is not None:
            if appt.id in seen:
                continue
            seen.add(appt.id)
        buckets[(appt.date - start).days + 1].append(appt)

    for bucket in buckets.values():
        bucket.sort(key=lambda a: (a.start_time, a.id if a.id is not None else 0))
    return buckets


def check_transition(current, new) -> None:
    current, new = _value(current), _value(new)
    if new not in TRANSITIONS.get(current, set()):
        raise InvalidStatusTransition(current, new)
