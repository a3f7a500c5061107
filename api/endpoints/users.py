"""
Recipe Share User Endpoints
Own profile and activity history
"""

from typing import List

from fastapi import APIRouter

from core.dependencies import AuthenticatedPrincipal, DbSession, PaginationParams
from schemas.admin_schemas import ActivityResponse
from schemas.auth_schemas import User, UserUpdate
from services import activity_service, user_service

router = APIRouter()


@router.get("/me/activity", response_model=List[ActivityResponse])
def get_my_activity(principal: AuthenticatedPrincipal, db: DbSession, pagination: PaginationParams):
    """Activity log entries of the current user, newest first"""
    return activity_service.list_own_activity(
        db, principal, limit=pagination["limit"], offset=pagination["offset"]
    )


@router.put("/me", response_model=User)
def update_me(data: UserUpdate, principal: AuthenticatedPrincipal, db: DbSession):
    """Update the current user's profile and preferences"""
    return user_service.update_profile(db, principal, principal.user_id, data)
