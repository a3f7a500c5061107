"""
Recipe Share Authentication Endpoints
Sign-up, sign-in and the current account
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import structlog

from core.database import get_db
from core.dependencies import CurrentUser
from services.auth_service import auth_service
from schemas.auth_schemas import UserCreate, UserLogin, User, AuthResponse
from middleware.logging import log_business_event

logger = structlog.get_logger()
router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserCreate,
    db: Session = Depends(get_db)
):
    """
    Register a new user account

    New accounts always get the `user` role; elevation is an admin action.
    """
    user, tokens = auth_service.register_user(user_data, db)
    log_business_event("user_registered", {"user_id": user.id})

    return AuthResponse(
        user=User.model_validate(user),
        tokens=tokens,
        message="Registration successful!"
    )


@router.post("/login", response_model=AuthResponse)
def login(
    login_data: UserLogin,
    db: Session = Depends(get_db)
):
    """Authenticate user and return an access token"""
    user, tokens = auth_service.authenticate_user(login_data, db)

    return AuthResponse(
        user=User.model_validate(user),
        tokens=tokens,
        message="Login successful!"
    )


@router.get("/me", response_model=User)
def get_me(current_user: CurrentUser):
    """Get current user profile"""
    return current_user
