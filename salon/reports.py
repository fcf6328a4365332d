# salon/reports.py
"""Revenue and activity figures computed from appointments and the service catalog"""

from collections import Counter
from datetime import date
from typing import Dict, Iterable, List, Mapping

from salon.schemas import AppointmentStatus

COMPLETED = AppointmentStatus.completed.value


def _price(appointment, catalog: Mapping) -> float:
    service = catalog.get(appointment.service_id)
    return service.price if service is not None else 0.0


def revenue(appointments: Iterable, catalog: Mapping) -> float:
    total = sum(_price(a, catalog) for a in appointments if a.status == COMPLETED)
    return round(total, 2)


def average_ticket(appointments: Iterable, catalog: Mapping) -> float:
    completed = [a for a in appointments if a.status == COMPLETED]
    if not completed:
        return 0.0
    return round(revenue(completed, catalog) / len(completed), 2)


def status_counts(appointments: Iterable) -> Dict[str, int]:
    counts = {status.value: 0 for status in AppointmentStatus}
    for appointment in appointments:
        counts[appointment.status] = counts.get(appointment.status, 0) + 1
    return counts


def service_popularity(appointments: Iterable, catalog: Mapping, limit: int = 5) -> List[dict]:
    counts = Counter(
        a.service_id
        for a in appointments
        if a.status != AppointmentStatus.cancelled.value and a.service_id in catalog
    )
    ranked = sorted(counts.items(), key=lambda item: (-item[1], catalog[item[0]].name))
    return [
        {"service_id": service_id, "name": catalog[service_id].name, "count": count}
        for service_id, count in ranked[:limit]
    ]


def monthly_revenue(appointments: Iterable, catalog: Mapping, year: int) -> List[float]:
    totals = [0.0] * 12
    for appointment in appointments:
        if appointment.status == COMPLETED and appointment.date.year == year:
            totals[appointment.date.month - 1] += _price(appointment, catalog)
    return [round(total, 2) for total in totals]


def dashboard(appointments: List, catalog: Mapping, clients: List, today: date) -> dict:
    todays = sorted(
        (a for a in appointments if a.date == today),
        key=lambda a: (a.start_time, a.id),
    )
    return {
        "today": today,
        "todays_appointments": todays,
        "total_revenue": revenue(appointments, catalog),
        "todays_revenue": revenue(todays, catalog),
        "active_clients": len(clients),
        "pending_appointments": sum(1 for a in appointments if a.status == AppointmentStatus.pending.value),
    }
