# salon/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from salon.config import get_settings
from salon.db import create_tables
from salon.errors import SalonError
from salon.logging_config import setup_logging
from salon.routers import (
    appointments_routes,
    auth_routes,
    clients_routes,
    reports_routes,
    services_routes,
    staff_routes,
    users_routes,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    create_tables()
    logger.info("Salon scheduling API started")
    yield


app = FastAPI(title=get_settings().APP_NAME, lifespan=lifespan)


@app.exception_handler(SalonError)
async def salon_error_handler(request: Request, exc: SalonError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": exc.code},
    )


@app.get("/health")
def health_check():
    return {"status": "ok"}


app.include_router(auth_routes.router)
app.include_router(users_routes.router)
app.include_router(clients_routes.router)
app.include_router(services_routes.router)
app.include_router(staff_routes.router)
app.include_router(appointments_routes.router)
app.include_router(reports_routes.router)
