# salon/schemas.py

from pydantic import BaseModel, Field
from enum import Enum
from datetime import datetime, date as Date, time as Time
from typing import Dict, List, Optional, Union


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRole(str, Enum):
    manager = "manager"
    receptionist = "receptionist"
    stylist = "stylist"


class AppointmentStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"


class UserPublic(BaseModel):
    id: int
    email: str
    role: UserRole


class UserCreate(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=72)
    role: UserRole


# Clients

class ClientCreate(BaseModel):
    name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    preferences: Optional[str] = None
    notes: Optional[str] = None


class ClientUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    preferences: Optional[str] = None
    notes: Optional[str] = None


class ClientPublic(ClientCreate):
    id: int
    created_at: datetime


# Services

class ServiceCreate(BaseModel):
    name: str = Field(min_length=1)
    category: str
    price: float = Field(ge=0)
    duration: int = Field(gt=0)
    description: Optional[str] = None


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    duration: Optional[int] = Field(default=None, gt=0)
    description: Optional[str] = None


class ServicePublic(ServiceCreate):
    id: int


# Staff

# weekday -> "off" or ["HH:MM", "HH:MM"]
ScheduleIn = Dict[str, Union[str, List[str]]]


class StaffCreate(BaseModel):
    name: str = Field(min_length=1)
    role: str
    email: Optional[str] = None
    phone: Optional[str] = None
    schedule: ScheduleIn = Field(default_factory=dict)


class StaffUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    role: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class StaffPublic(StaffCreate):
    id: int


class AvailabilityResponse(BaseModel):
    staff_id: int
    date: Date
    available_starts: List[str]


# Appointments

class AppointmentCreate(BaseModel):
    client_id: int
    staff_id: int
    service_id: int
    date: Date
    start_time: Time
    status: AppointmentStatus = AppointmentStatus.pending
    notes: Optional[str] = None


class AppointmentUpdate(BaseModel):
    client_id: Optional[int] = None
    staff_id: Optional[int] = None
    service_id: Optional[int] = None
    date: Optional[Date] = None
    start_time: Optional[Time] = None
    notes: Optional[str] = None


class StatusChange(BaseModel):
    status: AppointmentStatus


class AppointmentPublic(BaseModel):
    id: int
    client_id: int
    staff_id: int
    service_id: int
    date: Date
    start_time: Time
    end_time: Time
    status: AppointmentStatus
    notes: Optional[str] = None


class WeekResponse(BaseModel):
    week_start: Date
    days: Dict[int, List[AppointmentPublic]]


# Reports

class ServiceCount(BaseModel):
    service_id: int
    name: str
    count: int


class ReportSummary(BaseModel):
    revenue: float
    average_ticket: float
    status_counts: Dict[str, int]
    service_popularity: List[ServiceCount]
    monthly_revenue: List[float]


class DashboardResponse(BaseModel):
    today: Date
    todays_appointments: List[AppointmentPublic]
    total_revenue: float
    todays_revenue: float
    active_clients: int
    pending_appointments: int
