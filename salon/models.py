# salon/models.py

from typing import Optional, Dict, Any
from datetime import datetime, timezone, date as Date, time

from sqlalchemy import Index, text
from sqlalchemy.types import JSON
from sqlmodel import SQLModel, Field, Column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Appointment(SQLModel, table=True):
    # one live booking per staff member and start; cancelled rows free the slot
    # and authorized double-bookings leave exclusive NULL
    __table_args__ = (
        Index(
            "uq_staff_start",
            "staff_id",
            "date",
            "start_time",
            unique=True,
            sqlite_where=text("status != 'cancelled' AND exclusive IS NOT NULL"),
            postgresql_where=text("status != 'cancelled' AND exclusive IS NOT NULL"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    client_id: int = Field(index=True)
    staff_id: int = Field(index=True)
    service_id: int = Field(index=True)
    date: Date = Field(index=True)
    start_time: time
    end_time: time
    status: str = "pending"
    notes: Optional[str] = None
    exclusive: Optional[bool] = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None


class Client(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    email: Optional[str] = None
    phone: Optional[str] = None
    preferences: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class Service(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    category: str = Field(index=True)
    price: float = Field(ge=0)
    duration: int = Field(gt=0)  # minutes
    description: Optional[str] = None


class StaffMember(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    role: str = Field(index=True)
    email: Optional[str] = None
    phone: Optional[str] = None
    # {"monday": ["09:00", "17:00"], "sunday": "off"}
    schedule: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    role: str  # manager, receptionist or stylist
