# salon/routers/clients_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from salon.auth import get_current_user
from salon.deps import FRONT_DESK, STAFF_ROLES, get_store, require_role
from salon.errors import NotFound
from salon.repositories import AppointmentRepository, ClientRepository
from salon.schemas import AppointmentPublic, ClientCreate, ClientPublic, ClientUpdate
from salon.store import RecordStore

router = APIRouter(
    prefix="/clients",
    tags=["clients"],
)


@router.get("", response_model=List[ClientPublic])
def list_clients(
    q: Optional[str] = None,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *STAFF_ROLES)
    clients = ClientRepository(store)
    return clients.search(q) if q else clients.all()


@router.post("", response_model=ClientPublic, status_code=201)
def create_client(
    client: ClientCreate,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *FRONT_DESK)
    return ClientRepository(store).create(client.model_dump())


@router.get("/{client_id}", response_model=ClientPublic)
def get_client(
    client_id: int,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *STAFF_ROLES)
    return ClientRepository(store).get(client_id)


@router.patch("/{client_id}", response_model=ClientPublic)
def update_client(
    client_id: int,
    changes: ClientUpdate,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *FRONT_DESK)
    return ClientRepository(store).update(client_id, changes.model_dump(exclude_unset=True))


@router.delete("/{client_id}", status_code=204)
def delete_client(
    client_id: int,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *FRONT_DESK)
    if not ClientRepository(store).delete(client_id):
        raise NotFound(f"Client {client_id} not found")
    return Response(status_code=204)


@router.get("/{client_id}/appointments", response_model=List[AppointmentPublic])
def client_appointments(
    client_id: int,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, *STAFF_ROLES)
    ClientRepository(store).get(client_id)
    appointments = AppointmentRepository(store).by_client(client_id)
    return sorted(appointments, key=lambda a: (a.date, a.start_time))
