"""
Recipe Share Favorite Service
Favorite join rows and the recipe favorite_count counter
"""

from typing import Iterable, List, Optional

import structlog
from sqlalchemy import case, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import transaction
from core.exceptions import Conflict, NotFound
from models.recipe_models import Recipe
from models.social_models import Favorite
from services import activity_service
from services.policy import EntityType, Operation, Principal, enforce, require_authenticated
from utils.date_utils import utcnow

logger = structlog.get_logger()


def _bump_favorite_count(db: Session, recipe_id: str, delta: int) -> None:
    """
    Adjust the counter with one UPDATE evaluated by the database, so
    concurrent writers serialize on the row instead of overwriting a
    value read earlier. Decrements never take the counter below zero.
    """
    if delta >= 0:
        new_value = Recipe.favorite_count + delta
    else:
        new_value = case(
            (Recipe.favorite_count + delta < 0, 0),
            else_=Recipe.favorite_count + delta,
        )
    db.execute(
        update(Recipe)
        .where(Recipe.id == recipe_id)
        .values(favorite_count=new_value)
        .execution_options(synchronize_session=False)
    )


def add_favorite(db: Session, principal: Principal, recipe_id: str) -> Recipe:
    require_authenticated(principal)
    recipe = enforce(principal, Operation.READ, EntityType.RECIPE, db.get(Recipe, recipe_id))
    if recipe.is_deleted:
        # Admins can read deleted recipes but nobody favorites them
        raise NotFound()
    if db.get(Favorite, (principal.user_id, recipe.id)) is not None:
        raise Conflict("Recipe is already in favorites")

    favorite = Favorite(user_id=principal.user_id, recipe_id=recipe.id, favorited_at=utcnow())
    enforce(principal, Operation.CREATE, EntityType.FAVORITE, favorite)

    try:
        with transaction(db):
            db.add(favorite)
            db.flush()
            _bump_favorite_count(db, recipe.id, 1)
            activity_service.log_activity(db, principal, "favorite", recipe_id=recipe.id)
    except IntegrityError:
        logger.info("Duplicate favorite rejected", recipe_id=recipe.id, user_id=principal.user_id)
        raise Conflict("Recipe is already in favorites")

    db.refresh(recipe)
    logger.info("Recipe favorited", recipe_id=recipe.id, user_id=principal.user_id,
                favorite_count=recipe.favorite_count)
    return recipe


def remove_favorite(db: Session, principal: Principal, recipe_id: str) -> Recipe:
    require_authenticated(principal)
    favorite = db.get(Favorite, (principal.user_id, recipe_id))
    enforce(principal, Operation.DELETE, EntityType.FAVORITE, favorite)

    with transaction(db):
        result = db.execute(
            delete(Favorite)
            .where(Favorite.user_id == principal.user_id, Favorite.recipe_id == recipe_id)
            .execution_options(synchronize_session=False)
        )
        # A concurrent removal may already have taken the row and its decrement
        if result.rowcount:
            _bump_favorite_count(db, recipe_id, -1)
            activity_service.log_activity(db, principal, "unfavorite", recipe_id=recipe_id)
    db.expunge(favorite)

    recipe = db.get(Recipe, recipe_id)
    db.refresh(recipe)
    logger.info("Recipe unfavorited", recipe_id=recipe_id, user_id=principal.user_id,
                favorite_count=recipe.favorite_count)
    return recipe


def is_favorited(db: Session, principal: Principal, recipe_id: str) -> bool:
    if not principal.is_authenticated:
        return False
    return db.get(Favorite, (principal.user_id, recipe_id)) is not None


def list_favorites(db: Session, principal: Principal, limit: int = 50, offset: int = 0) -> List[Favorite]:
    """The principal's favorites whose recipe is still readable, newest first"""
    require_authenticated(principal)
    rows = db.scalars(
        select(Favorite)
        .join(Recipe, Recipe.id == Favorite.recipe_id)
        .where(Favorite.user_id == principal.user_id, Recipe.is_deleted.is_(False))
        .order_by(Favorite.favorited_at.desc())
        .limit(limit)
        .offset(offset)
    ).all()
    return [row for row in rows if enforce(principal, Operation.READ, EntityType.FAVORITE, row)]


def reconcile_favorite_counts(db: Session, recipe_ids: Optional[Iterable[str]] = None) -> int:
    """
    Recompute favorite_count from the join rows. Returns how many recipes
    were out of step. Caller owns the transaction.
    """
    actual = (
        select(func.count())
        .select_from(Favorite)
        .where(Favorite.recipe_id == Recipe.id)
        .correlate(Recipe)
        .scalar_subquery()
    )
    stmt = update(Recipe).where(Recipe.favorite_count != actual).values(favorite_count=actual)
    if recipe_ids is not None:
        ids = list(recipe_ids)
        if not ids:
            return 0
        stmt = stmt.where(Recipe.id.in_(ids))

    result = db.execute(stmt.execution_options(synchronize_session=False))
    if result.rowcount:
        logger.warning("Favorite counts reconciled", recipes_fixed=result.rowcount)
    return result.rowcount or 0
