# salon/routers/reports_routes.py

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends

from salon import reports
from salon.auth import get_current_user
from salon.config import get_settings
from salon.deps import FRONT_DESK, get_store, require_role
from salon.repositories import AppointmentRepository, ClientRepository, ServiceRepository
from salon.schemas import DashboardResponse, ReportSummary
from salon.store import RecordStore

router = APIRouter(
    prefix="/reports",
    tags=["reports"],
)


def shop_today() -> date:
    return datetime.now(ZoneInfo(get_settings().TIMEZONE)).date()


@router.get("/summary", response_model=ReportSummary)
def summary(
    year: Optional[int] = None,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *FRONT_DESK)
    appointments = AppointmentRepository(store).all()
    catalog = ServiceRepository(store).catalog()

    return {
        "revenue": reports.revenue(appointments, catalog),
        "average_ticket": reports.average_ticket(appointments, catalog),
        "status_counts": reports.status_counts(appointments),
        "service_popularity": reports.service_popularity(appointments, catalog),
        "monthly_revenue": reports.monthly_revenue(appointments, catalog, year or shop_today().year),
    }


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    on: Optional[date] = None,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *FRONT_DESK)
    return reports.dashboard(
        AppointmentRepository(store).all(),
        ServiceRepository(store).catalog(),
        ClientRepository(store).all(),
        on or shop_today(),
    )
