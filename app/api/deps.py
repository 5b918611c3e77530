"""
Dependencies for authentication and database sessions.
"""
from typing import Generator
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.database import SessionLocal
from app.models.db import User
from app.models.db.enums import UserRole
from app.utils import get_logger

logger = get_logger(__name__)
security = HTTPBearer()

def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.
    Ensures proper session lifecycle management with automatic cleanup.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error("Database session error", error=str(e), exc_info=True)
        db.rollback()
        raise
    finally:
        db.close()

def _key_prefix(api_key: str) -> str:
    return api_key[:10] + "..." if len(api_key) > 10 else api_key

def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Resolve the dashboard user from a Bearer API key.

    Raises:
        HTTPException: 401 if the key is unknown or the user is inactive
    """
    api_key = credentials.credentials

    user = db.query(User).filter(
        User.api_key == api_key,
        User.is_active == True  # noqa: E712
    ).first()

    if not user:
        logger.warning(
            "Authentication failed: invalid or inactive API key",
            api_key_prefix=_key_prefix(api_key)
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or inactive API key",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.debug("User authenticated", user_id=user.id, user_role=user.role)
    return user

def require_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Dependency that requires ADMIN role.

    Raises:
        HTTPException: 403 if user is not an admin
    """
    if current_user.role != UserRole.ADMIN:
        logger.warning(
            "Access denied: admin required",
            user_id=current_user.id,
            user_role=current_user.role
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )

    return current_user
