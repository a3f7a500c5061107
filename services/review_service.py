"""
Recipe Share Review Service
One review per user per recipe
"""

from typing import List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import transaction
from core.exceptions import Conflict, NotFound, ValidationFailed
from models.recipe_models import Recipe
from models.social_models import Review
from schemas.social_schemas import ReviewCreate, ReviewUpdate
from services import activity_service
from services.policy import (
    EntityType, Operation, Principal, authorize, enforce, require_authenticated, visible_reviews_clause,
)
from utils.date_utils import utcnow

logger = structlog.get_logger()


def _check_rating(rating: Optional[int]) -> None:
    if rating is None or not 1 <= rating <= 5:
        raise ValidationFailed("Rating must be an integer between 1 and 5")


class ReviewService:

    def create_review(self, db: Session, principal: Principal, recipe_id: str, data: ReviewCreate) -> Review:
        """
        Review a readable recipe. A second review by the same user is a
        Conflict and leaves the first one untouched.
        """
        require_authenticated(principal)
        _check_rating(data.rating)

        recipe = enforce(principal, Operation.READ, EntityType.RECIPE, db.get(Recipe, recipe_id))
        if recipe.is_deleted:
            raise NotFound()

        existing = db.scalar(
            select(Review.id).where(Review.recipe_id == recipe.id, Review.author_id == principal.user_id)
        )
        if existing is not None:
            raise Conflict("You have already reviewed this recipe")

        now = utcnow()
        review = Review(
            recipe_id=recipe.id,
            author_id=principal.user_id,
            rating=data.rating,
            review_text=data.review_text,
            would_make_again=data.would_make_again,
            created_at=now,
            updated_at=now,
        )
        enforce(principal, Operation.CREATE, EntityType.REVIEW, review)

        try:
            with transaction(db):
                db.add(review)
                db.flush()
                activity_service.log_activity(
                    db, principal, "review", recipe_id=recipe.id, details={"rating": data.rating}
                )
        except IntegrityError:
            # Lost a race with a concurrent submission from the same user
            raise Conflict("You have already reviewed this recipe")

        logger.info("Review created", review_id=review.id, recipe_id=recipe.id, rating=review.rating)
        return review

    def update_review(self, db: Session, principal: Principal, review_id: str, data: ReviewUpdate) -> Review:
        review = enforce(principal, Operation.UPDATE, EntityType.REVIEW, db.get(Review, review_id))
        changes = data.model_dump(exclude_unset=True)
        if "rating" in changes:
            _check_rating(changes["rating"])

        with transaction(db):
            for field, value in changes.items():
                setattr(review, field, value)
            review.updated_at = utcnow()

        logger.info("Review updated", review_id=review.id, fields=sorted(changes))
        return review

    def delete_review(self, db: Session, principal: Principal, review_id: str) -> None:
        review = enforce(principal, Operation.DELETE, EntityType.REVIEW, db.get(Review, review_id))

        with transaction(db):
            db.delete(review)

        logger.info("Review deleted", review_id=review_id, user_id=principal.user_id)

    def list_reviews(
        self, db: Session, principal: Principal, recipe_id: str, limit: int = 50, offset: int = 0
    ) -> List[Review]:
        """Reviews of a recipe the caller can read, newest first"""
        recipe = enforce(principal, Operation.READ, EntityType.RECIPE, db.get(Recipe, recipe_id))
        if recipe.is_deleted and not principal.is_admin:
            raise NotFound()

        rows = db.scalars(
            select(Review)
            .where(Review.recipe_id == recipe.id, visible_reviews_clause(principal))
            .order_by(Review.created_at.desc(), Review.id)
            .limit(limit)
            .offset(offset)
        ).all()
        return [row for row in rows if authorize(principal, Operation.READ, EntityType.REVIEW, row).allowed]


# Create singleton instance
review_service = ReviewService()
