"""
Authentication utilities: JWT token validation and user extraction.
"""

from typing import Optional
from uuid import UUID
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.models.user import User
from app.utils.jwt import decode_access_token

security = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> UUID:
    """
    Extract and validate user_id from JWT token.

    The user must exist and not be soft-deleted.

    Args:
        credentials: HTTP Bearer token from Authorization header
        db: Database session

    Returns:
        user_id (UUID) from token

    Raises:
        HTTPException: 401 if the token is missing, invalid or names an
            unknown user
    """
    user_id = None
    if credentials is not None:
        user_id = decode_access_token(credentials.credentials)

    if user_id is not None:
        exists = (
            db.query(User.user_id)
            .filter(User.user_id == user_id, User.deleted_at.is_(None))
            .first()
        )
        if exists is None:
            user_id = None

    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user_id


def get_optional_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[UUID]:
    """
    Extract user_id from JWT token if present, otherwise return None.

    Used by read endpoints that allow anonymous access.

    Args:
        credentials: HTTP Bearer token from Authorization header (optional)

    Returns:
        user_id (UUID) if token is valid, None otherwise
    """
    if credentials is None:
        return None

    return decode_access_token(credentials.credentials)
