# salon/routers/auth_routes.py

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm

from salon.auth import verify_password, create_access_token
from salon.deps import get_store
from salon.repositories import UserRepository
from salon.schemas import Token
from salon.store import RecordStore

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    store: RecordStore = Depends(get_store),
):
    # Swagger OAuth2 "password" flow uses the "username" field for the email
    user = UserRepository(store).by_email(form_data.username)

    if user is None or not verify_password(form_data.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": user.email})
    return {"access_token": token, "token_type": "bearer"}
