import logging
import re
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr, Field, field_validator
from app.core.database import get_db
from app.core.errors import DuplicateIdentityError, InvalidCredentialError, NotFoundError
from app.api.dependencies import (
    RequireRoles,
    ValidRoles,
    credentials_exception,
    get_auth_service,
)
from app.services.access_guard import AuthenticatedUser
from app.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

# At least one uppercase and one lowercase letter, plus a digit or a symbol
PASSWORD_STRENGTH = re.compile(r"(?:(?=.*\d)|(?=.*\W+))(?![.\n])(?=.*[A-Z])(?=.*[a-z]).*$")
WEAK_PASSWORD_MESSAGE = (
    "Password is too weak, it must contain at least one uppercase letter, "
    "one lowercase letter and one number or special character"
)
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


def check_password_strength(value: str) -> str:
    # Lookaheads may succeed anywhere in the string, not only at its start
    if not PASSWORD_STRENGTH.search(value):
        raise ValueError(WEAK_PASSWORD_MESSAGE)
    return value


class UserCreate(BaseModel):
    name: str = Field(..., min_length=3)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=50)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return check_password_strength(v)


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=50)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return check_password_strength(v)


class RegisterResponse(BaseModel):
    email: str
    token: str


class LoginResponse(BaseModel):
    token: str


class MessageResponse(BaseModel):
    message: str


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Register a new user and return a session token"""
    try:
        return auth_service.register(
            db,
            name=user_data.name,
            email=user_data.email,
            password=user_data.password,
        )
    except DuplicateIdentityError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists"
        )
    except SQLAlchemyError:
        # Rollback prevents a half-finished transaction from leaking into the session
        db.rollback()
        logger.exception("Database error during registration")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred"
        )


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
def login(
    login_data: UserLogin,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Login and get a session token"""
    try:
        return auth_service.login(db, email=login_data.email, password=login_data.password)
    except (NotFoundError, InvalidCredentialError):
        # One message for unknown email and wrong password - no account enumeration
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=INVALID_CREDENTIALS_MESSAGE
        )


@router.get("/logout", response_model=MessageResponse)
def logout(
    current_user: AuthenticatedUser = Depends(RequireRoles(ValidRoles.user)),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Logout: deactivate the current user until the next login"""
    try:
        return auth_service.logout(db, current_user.id)
    except NotFoundError:
        # User vanished between the guard and here; answer like the guard would
        raise credentials_exception()
