"""
Recipe Share Core Dependencies
FastAPI dependencies for authentication, principals and pagination
"""

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional, Annotated
import structlog

from core.config import settings
from core.database import get_db
from core.exceptions import Unauthorized
from models.users import User
from services.auth_service import auth_service, AuthenticationError
from services.policy import Principal, DenyReason
from utils.request_utils import get_client_ip, get_session_id

logger = structlog.get_logger()

# Security scheme
security = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from JWT token

    Raises:
        Unauthorized: If token is missing, invalid or the user is gone or disabled
    """
    if not credentials:
        raise Unauthorized(reason=DenyReason.NOT_AUTHENTICATED.value)

    try:
        user = auth_service.get_current_user(credentials.credentials, db)
    except AuthenticationError as e:
        logger.warning("Authentication failed", error=e.message, ip=get_client_ip(request))
        raise Unauthorized("Could not validate credentials", reason=DenyReason.NOT_AUTHENTICATED.value)

    structlog.contextvars.bind_contextvars(user_id=str(user.id))
    return user


def get_optional_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Get current user if authenticated, None otherwise

    Used for endpoints that work for both authenticated and anonymous users
    """
    if not credentials:
        return None

    try:
        user = auth_service.get_current_user(credentials.credentials, db)
    except AuthenticationError as e:
        logger.debug("Optional authentication failed", error=e.message)
        return None

    structlog.contextvars.bind_contextvars(user_id=str(user.id))
    return user


def get_principal(
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
) -> Principal:
    """Principal for the request: the signed-in user, or a guest with its session id"""
    if user is not None:
        return Principal.for_user(user)
    return Principal.anonymous(session_id=get_session_id(request))


def get_authenticated_principal(user: User = Depends(get_current_user)) -> Principal:
    return Principal.for_user(user)


def get_pagination_params(
    page: int = 1,
    limit: int = settings.DEFAULT_PAGE_SIZE,
) -> dict:
    """
    Get pagination parameters with validation

    Args:
        page: Page number (1-based)
        limit: Items per page

    Returns:
        Dictionary with offset, limit, page
    """
    if page < 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Page must be greater than 0"
        )

    if limit < 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Limit must be greater than 0"
        )

    if limit > settings.MAX_PAGE_SIZE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Limit cannot exceed {settings.MAX_PAGE_SIZE}"
        )

    return {
        "offset": (page - 1) * limit,
        "limit": limit,
        "page": page
    }


# Type aliases for common dependencies
CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[User], Depends(get_optional_user)]
RequestPrincipal = Annotated[Principal, Depends(get_principal)]
AuthenticatedPrincipal = Annotated[Principal, Depends(get_authenticated_principal)]
PaginationParams = Annotated[dict, Depends(get_pagination_params)]
DbSession = Annotated[Session, Depends(get_db)]
