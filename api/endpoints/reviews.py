"""
Recipe Share Review Endpoints
Edit and remove one's own reviews
"""

from fastapi import APIRouter, status

from core.dependencies import AuthenticatedPrincipal, DbSession
from schemas.social_schemas import ReviewResponse, ReviewUpdate
from services.review_service import review_service

router = APIRouter()


@router.put("/{review_id}", response_model=ReviewResponse)
def update_review(review_id: str, data: ReviewUpdate, principal: AuthenticatedPrincipal, db: DbSession):
    return review_service.update_review(db, principal, review_id, data)


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(review_id: str, principal: AuthenticatedPrincipal, db: DbSession):
    review_service.delete_review(db, principal, review_id)
