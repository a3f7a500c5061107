"""
Recipe Share Recipe Service
Recipe lifecycle: create, read, list, update, soft delete and restore
"""

from typing import List, Optional, Tuple

import structlog
from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from core.database import transaction
from core.exceptions import NotFound, ValidationFailed
from models.recipe_models import Recipe
from schemas.recipe_schemas import RecipeCreate, RecipeResponse, RecipeUpdate
from services import activity_service
from services.admin_service import record_admin_action
from services.nutrition_service import build_ingredient_lines, nutrition_service
from services.policy import (
    EntityType, Operation, Principal, enforce, require_authenticated, visible_recipes_clause,
)
from utils.date_utils import utcnow

logger = structlog.get_logger()

# Owner-only fields a recipe update may carry
OWNER_ONLY_FIELDS = ("notes", "rating")


class RecipeService:
    """Recipe operations, each one a single transaction"""

    def create_recipe(self, db: Session, principal: Principal, data: RecipeCreate) -> Recipe:
        require_authenticated(principal)
        now = utcnow()

        recipe = Recipe(
            owner_id=principal.user_id,
            title=data.title,
            description=data.description,
            instructions=data.instructions,
            prep_time_minutes=data.prep_time_minutes,
            cook_time_minutes=data.cook_time_minutes,
            servings=data.servings,
            difficulty_level=data.difficulty_level.value if data.difficulty_level else None,
            cuisine_type=data.cuisine_type,
            meal_type=data.meal_type,
            image_url=data.image_url,
            source_url=data.source_url,
            source_type=data.source_type.value,
            is_public=data.is_public,
            view_count=0,
            favorite_count=0,
            created_at=now,
            updated_at=now,
        )
        enforce(principal, Operation.CREATE, EntityType.RECIPE, recipe)

        with transaction(db):
            db.add(recipe)
            build_ingredient_lines(db, recipe, data.ingredients)
            db.flush()
            nutrition_service.refresh(db, recipe)
            activity_service.log_activity(db, principal, "create_recipe", recipe_id=recipe.id)

        logger.info("Recipe created", recipe_id=recipe.id, user_id=principal.user_id, is_public=recipe.is_public)
        return recipe

    def get_recipe(self, db: Session, principal: Principal, recipe_id: str, count_view: bool = True) -> Recipe:
        """
        Read a recipe. Non-owner reads bump view_count with a single
        UPDATE so concurrent readers never lose an increment.
        """
        recipe = enforce(principal, Operation.READ, EntityType.RECIPE, db.get(Recipe, recipe_id))

        if count_view and principal.user_id != recipe.owner_id:
            with transaction(db):
                db.execute(
                    update(Recipe)
                    .where(Recipe.id == recipe.id)
                    .values(view_count=Recipe.view_count + 1)
                    .execution_options(synchronize_session=False)
                )
                activity_service.log_activity(db, principal, "view_recipe", recipe_id=recipe.id)
            db.refresh(recipe)

        return recipe

    def list_recipes(
        self,
        db: Session,
        principal: Principal,
        search: Optional[str] = None,
        cuisine_type: Optional[str] = None,
        meal_type: Optional[str] = None,
        owner_id: Optional[str] = None,
        include_deleted: bool = False,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Recipe], int]:
        """List the recipes the principal can read, newest first"""
        query = select(Recipe).where(visible_recipes_clause(principal))

        # Soft-deleted rows only surface to admins, and only on request
        if not (include_deleted and principal.is_admin):
            query = query.where(Recipe.is_deleted.is_(False))

        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.where(
                or_(func.lower(Recipe.title).like(pattern), func.lower(Recipe.description).like(pattern))
            )
        if cuisine_type:
            query = query.where(func.lower(Recipe.cuisine_type) == cuisine_type.lower())
        if meal_type:
            query = query.where(func.lower(Recipe.meal_type) == meal_type.lower())
        if owner_id:
            query = query.where(Recipe.owner_id == owner_id)

        total = db.scalar(select(func.count()).select_from(query.subquery()))
        items = db.scalars(
            query.order_by(Recipe.created_at.desc(), Recipe.id).offset((page - 1) * limit).limit(limit)
        ).all()
        return list(items), total or 0

    def update_recipe(self, db: Session, principal: Principal, recipe_id: str, data: RecipeUpdate) -> Recipe:
        recipe = enforce(principal, Operation.UPDATE, EntityType.RECIPE, db.get(Recipe, recipe_id))
        changes = data.model_dump(exclude_unset=True, exclude={"ingredients", "reason"})
        is_owner = principal.user_id == recipe.owner_id

        if not is_owner and any(field in changes for field in OWNER_ONLY_FIELDS):
            raise ValidationFailed("Only the owner can change notes or rating")
        if changes.get("rating") is not None and not 1 <= changes["rating"] <= 5:
            raise ValidationFailed("Rating must be between 1 and 5")
        if "difficulty_level" in changes and changes["difficulty_level"] is not None:
            changes["difficulty_level"] = changes["difficulty_level"].value

        with transaction(db):
            for field, value in changes.items():
                setattr(recipe, field, value)
            if data.ingredients is not None:
                build_ingredient_lines(db, recipe, data.ingredients)
            if data.ingredients is not None or "servings" in changes:
                db.flush()
                nutrition_service.refresh(db, recipe)
            recipe.updated_at = utcnow()

            if not is_owner:
                record_admin_action(
                    db, principal, "update_recipe", EntityType.RECIPE, recipe.id,
                    reason=data.reason, details={"fields": sorted(changes)},
                )

        logger.info("Recipe updated", recipe_id=recipe.id, user_id=principal.user_id, fields=sorted(changes))
        return recipe

    def soft_delete_recipe(
        self, db: Session, principal: Principal, recipe_id: str, reason: Optional[str] = None
    ) -> Recipe:
        """
        Hide a recipe. Favorites, collection entries, reviews and counters
        are left as they are so that a restore brings everything back.
        """
        recipe = enforce(principal, Operation.DELETE, EntityType.RECIPE, db.get(Recipe, recipe_id))
        if recipe.is_deleted:
            raise NotFound()

        with transaction(db):
            now = utcnow()
            recipe.is_deleted = True
            recipe.deleted_at = now
            recipe.deleted_by = principal.user_id
            recipe.updated_at = now

            if principal.user_id != recipe.owner_id:
                record_admin_action(db, principal, "delete_recipe", EntityType.RECIPE, recipe.id, reason=reason)
            activity_service.log_activity(db, principal, "delete_recipe", recipe_id=recipe.id)

        logger.info("Recipe soft-deleted", recipe_id=recipe.id, deleted_by=principal.user_id)
        return recipe

    def restore_recipe(
        self, db: Session, principal: Principal, recipe_id: str, reason: Optional[str] = None
    ) -> Recipe:
        """Undo a soft delete (admin only)"""
        recipe = db.get(Recipe, recipe_id)
        enforce(principal, Operation.CREATE, EntityType.ADMIN_ACTION)
        if recipe is None or not recipe.is_deleted:
            raise NotFound()

        with transaction(db):
            recipe.is_deleted = False
            recipe.deleted_at = None
            recipe.deleted_by = None
            recipe.updated_at = utcnow()
            record_admin_action(db, principal, "restore_recipe", EntityType.RECIPE, recipe.id, reason=reason)

        logger.info("Recipe restored", recipe_id=recipe.id, admin_id=principal.user_id)
        return recipe


def redact_for(principal: Principal, recipe: Recipe) -> dict:
    """Serializable view of a recipe with owner-only fields blanked for others"""
    payload = RecipeResponse.model_validate(recipe).model_dump()
    if principal.user_id != recipe.owner_id:
        payload["notes"] = None
        payload["rating"] = None
        payload["times_cooked"] = 0
    return payload


# Create singleton instance
recipe_service = RecipeService()
