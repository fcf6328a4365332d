# salon/repositories.py

from datetime import date
from typing import Dict, List, Optional

from salon.models import Appointment, Client, Service, StaffMember, User
from salon.store import RecordStore


class Repository:
    model = None

    def __init__(self, store: RecordStore):
        self.store = store

    def all(self) -> List:
        return self.store.fetch_all(self.model)

    def get(self, record_id: int):
        return self.store.fetch_by_id(self.model, record_id)

    def create(self, record: dict):
        return self.store.create(self.model, record)

    def update(self, record_id: int, record: dict):
        return self.store.update(self.model, record_id, record)

    def delete(self, record_id: int) -> bool:
        return self.store.delete(self.model, [record_id])[record_id]

    def find(self, **filters) -> List:
        return self.store.query(self.model, filters=filters)


class AppointmentRepository(Repository):
    model = Appointment

    def for_staff_on(self, staff_id: int, day: date) -> List[Appointment]:
        return self.find(staff_id=staff_id, date=day)

    def in_range(
        self,
        start: date,
        end: date,
        staff_id: Optional[int] = None,
        client_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[Appointment]:
        filters = {"date": [">=", start]}
        # the store takes one condition per field, so the upper bound is applied here
        if staff_id is not None:
            filters["staff_id"] = staff_id
        if client_id is not None:
            filters["client_id"] = client_id
        if status is not None:
            filters["status"] = status
        return [a for a in self.find(**filters) if a.date <= end]

    def by_client(self, client_id: int) -> List[Appointment]:
        return self.find(client_id=client_id)

    def by_staff(self, staff_id: int) -> List[Appointment]:
        return self.find(staff_id=staff_id)


class ClientRepository(Repository):
    model = Client

    def search(self, term: str) -> List[Client]:
        term = term.strip()
        if not term:
            return self.all()
        seen = {}
        for field in ("name", "email", "phone"):
            for client in self.find(**{field: ["like", term]}):
                seen.setdefault(client.id, client)
        return [seen[client_id] for client_id in sorted(seen)]


class ServiceRepository(Repository):
    model = Service

    def catalog(self) -> Dict[int, Service]:
        return {service.id: service for service in self.all()}


class StaffRepository(Repository):
    model = StaffMember

    def by_role(self, role: str) -> List[StaffMember]:
        return self.find(role=role)


class UserRepository(Repository):
    model = User

    def by_email(self, email: str) -> Optional[User]:
        users = self.find(email=email)
        return users[0] if users else None
