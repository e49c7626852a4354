import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from schemas.auth_schema import (
    AuthResponse,
    LoginRequest,
    UserCreate,
    UserResponse,
)
from database.init import get_db
from database.models.user_model import User
from utils.dependencies import (
    verify_password,
    create_access_token,
    get_current_user,
)
from services.auth_service import create_user, get_user_by_email
from responses.success import data_response, created_response
from responses.error import (
    unauthorized_error,
    conflict_error,
    forbidden_error,
    internal_server_error,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _auth_payload(user: User) -> AuthResponse:
    token = create_access_token({"sub": user.email})
    return AuthResponse(
        access_token=token,
        token_type="bearer",
        user=UserResponse.model_validate(user),
    )


@router.post("/signup")
def signup(payload: UserCreate, db: Session = Depends(get_db)):
    existing = get_user_by_email(payload.email, db)
    if existing:
        return conflict_error("User already exists")

    try:
        user = create_user(payload, db)
        logger.info("User %s signed up", user.id)
        return created_response(_auth_payload(user))
    except Exception as e:
        logger.exception("Failed to register user")
        return internal_server_error(f"Failed to register user: {str(e)}")


@router.post("/signin")
def signin(credentials: LoginRequest, db: Session = Depends(get_db)):
    try:
        user = get_user_by_email(credentials.email, db)
        if not user or not verify_password(credentials.password, user.hashed_password):
            return unauthorized_error("Invalid credentials")
        if not user.is_active:
            return forbidden_error("Account is disabled")

        return data_response(_auth_payload(user))
    except Exception as e:
        logger.exception("Failed to sign in")
        return internal_server_error(str(e))


@router.get("/me")
def get_me(current_user: User = Depends(get_current_user)):
    """Route for any authenticated user to get their own information"""
    return data_response(UserResponse.model_validate(current_user))
