"""
Authentication service: account creation and credential checks.
"""
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import func

from database.models import User
from auth.security import verify_password, get_password_hash, validate_password
from core.logger import logger


class DuplicateEmailError(ValueError):
    """Raised when registering an email that already has an account."""


class AuthService:
    """Service for authentication operations."""

    @staticmethod
    def normalize_email(email: str) -> str:
        return email.strip().lower()

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(
            func.lower(User.email) == AuthService.normalize_email(email)
        ).first()

    @staticmethod
    def create_user(
        db: Session,
        full_name: str,
        email: str,
        password: str,
        phone: Optional[str] = None,
        is_admin: bool = False,
    ) -> User:
        """
        Create a new account.

        Args:
            db: Database session
            full_name: Display name
            email: Login email (unique, case-insensitive)
            password: Plain text password
            phone: Optional phone number
            is_admin: Grant admin privileges (only used by scripts/create_admin.py)

        Returns:
            Created User

        Raises:
            ValueError: If the password is too weak
            DuplicateEmailError: If the email is already registered
        """
        is_valid, error_message = validate_password(password)
        if not is_valid:
            raise ValueError(error_message)

        if AuthService.get_user_by_email(db, email):
            raise DuplicateEmailError("Email already registered")

        user = User(
            full_name=full_name.strip(),
            email=AuthService.normalize_email(email),
            hashed_password=get_password_hash(password),
            phone=phone,
            is_admin=is_admin,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"Created account {user.id} ({'admin' if is_admin else 'user'})")
        return user

    @staticmethod
    def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
        """
        Authenticate an account by email and password.

        Returns:
            The User, or None if the email is unknown or the password is wrong
        """
        user = AuthService.get_user_by_email(db, email)
        if user is None:
            logger.info("Login failed: unknown email")
            return None
        if not verify_password(password, user.hashed_password):
            logger.info(f"Login failed for account {user.id}: bad password")
            return None
        return user

    @staticmethod
    def user_to_dict(user: User) -> dict:
        """Public account fields (never the password hash)."""
        return {
            "id": user.id,
            "full_name": user.full_name,
            "email": user.email,
            "phone": user.phone,
            "is_admin": bool(user.is_admin),
            "created_at": user.created_at.isoformat() if user.created_at else None,
            "updated_at": user.updated_at.isoformat() if user.updated_at else None,
        }
