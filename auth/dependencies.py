"""
Authentication dependencies for FastAPI.

Authorization is stateless: everything a handler needs about the caller is
decoded from the bearer token.
"""
from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, HTTPException, status, Security
from fastapi.security import HTTPAuthorizationCredentials

from auth.security import security_optional, decode_access_token
import config


@dataclass(frozen=True)
class TokenClaims:
    """Caller identity decoded from an access token."""
    id: int
    email: str
    is_admin: bool


def get_db_session():
    """Get database session."""
    if not config.db:
        raise HTTPException(status_code=503, detail="Database not initialized")
    with config.db.get_session() as session:
        yield session


def claims_from_token(token: str) -> Optional[TokenClaims]:
    """Decode a raw token into claims, or None if it is invalid or expired."""
    payload = decode_access_token(token, config.SECRET_KEY)
    if payload is None:
        return None
    user_id = payload.get("id", payload.get("sub"))
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        return None
    return TokenClaims(
        id=user_id,
        email=payload.get("email", ""),
        is_admin=bool(payload.get("is_admin", False)),
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security_optional),
) -> TokenClaims:
    """
    Get the current caller from the bearer token.

    Raises:
        HTTPException: 401 if the header is missing or the token is invalid/expired
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    claims = claims_from_token(credentials.credentials)
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims


async def require_admin(
    current_user: TokenClaims = Depends(get_current_user)
) -> TokenClaims:
    """Require a valid token whose claims carry the admin flag."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden - Admin access required"
        )
    return current_user
