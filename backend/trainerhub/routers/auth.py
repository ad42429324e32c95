from fastapi import APIRouter, Depends, HTTPException

from trainerhub.database import JSONStore, get_db
from trainerhub.models.user import UserCreate, UserLogin
from trainerhub.services import user_service
from trainerhub.services.auth_service import create_access_token, get_current_user

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _session(user: dict) -> dict:
    return {
        "token": create_access_token(user["id"], user["email"]),
        "user": user_service.summary(user),
    }


@router.post("/register")
async def register(body: UserCreate, db: JSONStore = Depends(get_db)):
    """Create an account and return a bearer token for it."""
    try:
        user = await user_service.register_user(db, body.email, body.password, body.name)
    except user_service.UserServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
    return _session(user)


@router.post("/login")
async def login(body: UserLogin, db: JSONStore = Depends(get_db)):
    try:
        user = await user_service.authenticate(db, body.email, body.password)
    except user_service.UserServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
    return _session(user)


@router.get("/me")
async def me(user=Depends(get_current_user)):
    return user_service.public_profile(user)
