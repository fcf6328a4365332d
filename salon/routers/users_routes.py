# salon/routers/users_routes.py

from fastapi import APIRouter, Depends, HTTPException

from salon.auth import get_current_user, hash_password
from salon.deps import get_store
from salon.repositories import UserRepository
from salon.schemas import UserCreate, UserPublic
from salon.store import RecordStore

router = APIRouter(
    tags=["users"],
)


@router.get("/me", response_model=UserPublic)
def me(current_user: dict = Depends(get_current_user)):
    return current_user


@router.post("/users", status_code=201, response_model=UserPublic)
def create_user(
    user: UserCreate,
    store: RecordStore = Depends(get_store),
):
    users = UserRepository(store)

    # 1) Check if email already exists
    if users.by_email(user.email) is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    # 2) Create user
    db_user = users.create({
        "email": user.email,
        "password_hash": hash_password(user.password),
        "role": user.role.value,
    })

    # 3) Return public user
    return {"id": db_user.id, "email": db_user.email, "role": db_user.role}
