# salon/routers/services_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from salon.auth import get_current_user
from salon.deps import FRONT_DESK, STAFF_ROLES, get_store, require_role
from salon.errors import NotFound
from salon.repositories import ServiceRepository
from salon.schemas import ServiceCreate, ServicePublic, ServiceUpdate
from salon.store import RecordStore

router = APIRouter(
    prefix="/services",
    tags=["services"],
)


@router.get("", response_model=List[ServicePublic])
def list_services(
    category: Optional[str] = None,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *STAFF_ROLES)
    services = ServiceRepository(store)
    return services.find(category=category) if category else services.all()


@router.post("", response_model=ServicePublic, status_code=201)
def create_service(
    service: ServiceCreate,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *FRONT_DESK)
    return ServiceRepository(store).create(service.model_dump())


@router.get("/{service_id}", response_model=ServicePublic)
def get_service(
    service_id: int,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *STAFF_ROLES)
    return ServiceRepository(store).get(service_id)


@router.patch("/{service_id}", response_model=ServicePublic)
def update_service(
    service_id: int,
    changes: ServiceUpdate,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *FRONT_DESK)
    return ServiceRepository(store).update(service_id, changes.model_dump(exclude_unset=True))


@router.delete("/{service_id}", status_code=204)
def delete_service(
    service_id: int,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "manager")
    if not ServiceRepository(store).delete(service_id):
        raise NotFound(f"Service {service_id} not found")
    return Response(status_code=204)
