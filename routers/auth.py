"""
Account endpoints: register, login and current profile.
"""
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr
from typing import Optional

from database.models import User
from auth.dependencies import TokenClaims, get_current_user, get_db_session
from auth.security import issue_token_for_user
from core.validators import missing_fields
from services.auth_service import AuthService, DuplicateEmailError
from core.logger import logger


router = APIRouter(prefix="/api/auth", tags=["authentication"])


# Request Models
class RegisterRequest(BaseModel):
    """Registration request. Required fields are checked by the handler for a single 400 message."""
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    phone: Optional[str] = None


class LoginRequest(BaseModel):
    """Login request."""
    email: Optional[str] = None
    password: Optional[str] = None


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    request: Request,
    db: Session = Depends(get_db_session)
):
    """
    Create an account and return an access token.
    Public endpoint.
    """
    if missing_fields(payload.model_dump(), ("full_name", "email", "password")):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Full name, email and password are required"
        )

    try:
        user = AuthService.create_user(
            db=db,
            full_name=payload.full_name,
            email=payload.email,
            password=payload.password,
            phone=payload.phone,
        )
    except DuplicateEmailError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.info(f"Registration from {request.client.host if request.client else 'unknown'}: account {user.id}")
    return {
        "message": "Registration successful",
        "user": AuthService.user_to_dict(user),
        "token": issue_token_for_user(user),
    }


@router.post("/login")
async def login(
    payload: LoginRequest,
    db: Session = Depends(get_db_session)
):
    """
    Verify credentials and return an access token.
    Public endpoint.
    """
    if not payload.email or not payload.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required"
        )

    user = AuthService.authenticate_user(db, payload.email, payload.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    return {
        "message": "Login successful",
        "user": AuthService.user_to_dict(user),
        "token": issue_token_for_user(user),
    }


@router.get("/me")
async def me(
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db_session)
):
    """Current account profile."""
    user = db.query(User).filter(User.id == current_user.id).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return {"user": AuthService.user_to_dict(user)}
