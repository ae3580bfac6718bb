import logging

from fastapi import APIRouter, Depends, status

from .. import crud
from ..auth import create_access_token, get_current_user
from ..database import get_storage
from ..errors import NotFound
from ..schemas import (
    AuthResponse,
    Identity,
    LoginRequest,
    ProfileResponse,
    ProfileUpdate,
    RegisterRequest,
    UserOut,
    UserProfile,
)
from ..storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _token_for(user) -> str:
    return create_access_token(Identity(user_id=user.id, email=user.email))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, storage: Storage = Depends(get_storage)):
    logger.info("Registration attempt: %s", body.email)

    user = crud.create_user(storage, body)

    logger.info("User registered: %s (%s)", user.username, user.id)
    return AuthResponse(
        message="User registered successfully",
        token=_token_for(user),
        user=UserOut.model_validate(user.model_dump()),
    )


@router.post("/login", response_model=AuthResponse)
def login(body: LoginRequest, storage: Storage = Depends(get_storage)):
    logger.info("Login attempt: %s", body.email)

    user = crud.authenticate_user(storage, body.email, body.password)

    logger.info("User logged in: %s", user.id)
    return AuthResponse(
        message="Login successful",
        token=_token_for(user),
        user=UserOut.model_validate(user.model_dump()),
    )


@router.get("/profile", response_model=UserProfile)
def read_profile(
    current_user: Identity = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    user = crud.get_user(storage, current_user.user_id)
    if user is None:
        raise NotFound("User not found")
    return UserProfile.model_validate(user.model_dump())


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    body: ProfileUpdate,
    current_user: Identity = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    user = crud.update_profile(storage, current_user, body)
    return ProfileResponse(
        message="Profile updated successfully",
        user=UserOut.model_validate(user.model_dump()),
    )
