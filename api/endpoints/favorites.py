"""
Recipe Share Favorite Endpoints
"""

from typing import List

from fastapi import APIRouter

from core.dependencies import AuthenticatedPrincipal, DbSession, PaginationParams
from schemas.social_schemas import FavoriteResponse
from services import favorite_service

router = APIRouter()


@router.get("/", response_model=List[FavoriteResponse])
def list_favorites(principal: AuthenticatedPrincipal, db: DbSession, pagination: PaginationParams):
    """The current user's favorites, newest first"""
    return favorite_service.list_favorites(
        db, principal, limit=pagination["limit"], offset=pagination["offset"]
    )
