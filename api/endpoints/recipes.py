"""
Recipe Share Recipe Endpoints
Recipe CRUD, nutrition, favorites and reviews of a recipe
"""

from typing import List, Optional

from fastapi import APIRouter, Query, Request, status

from core.dependencies import AuthenticatedPrincipal, DbSession, PaginationParams, RequestPrincipal
from schemas.recipe_schemas import (
    NutritionFacts, RecipeCreate, RecipeListResponse, RecipeResponse, RecipeSummary, RecipeUpdate,
)
from schemas.social_schemas import FavoriteStatus, ReviewCreate, ReviewResponse
from services import favorite_service
from services.nutrition_service import nutrition_service
from services.recipe_service import recipe_service, redact_for
from services.review_service import review_service
from middleware.logging import log_user_activity

router = APIRouter()


@router.get("/", response_model=RecipeListResponse)
def list_recipes(
    principal: RequestPrincipal,
    db: DbSession,
    pagination: PaginationParams,
    search: Optional[str] = Query(None, max_length=200),
    cuisine_type: Optional[str] = None,
    meal_type: Optional[str] = None,
    owner_id: Optional[str] = None,
    include_deleted: bool = False,
):
    """List recipes the caller can read"""
    items, total = recipe_service.list_recipes(
        db,
        principal,
        search=search,
        cuisine_type=cuisine_type,
        meal_type=meal_type,
        owner_id=owner_id,
        include_deleted=include_deleted,
        page=pagination["page"],
        limit=pagination["limit"],
    )
    return RecipeListResponse(
        items=[RecipeSummary.model_validate(item) for item in items],
        total=total,
        page=pagination["page"],
        limit=pagination["limit"],
    )


@router.post("/", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
def create_recipe(data: RecipeCreate, principal: AuthenticatedPrincipal, db: DbSession):
    recipe = recipe_service.create_recipe(db, principal, data)
    log_user_activity("create_recipe", principal.user_id, {"recipe_id": recipe.id})
    return redact_for(principal, recipe)


@router.get("/{recipe_id}", response_model=RecipeResponse)
def get_recipe(recipe_id: str, principal: RequestPrincipal, db: DbSession):
    """Get a recipe; unreadable and missing recipes both answer 404"""
    recipe = recipe_service.get_recipe(db, principal, recipe_id)
    return redact_for(principal, recipe)


@router.put("/{recipe_id}", response_model=RecipeResponse)
def update_recipe(recipe_id: str, data: RecipeUpdate, principal: AuthenticatedPrincipal, db: DbSession):
    recipe = recipe_service.update_recipe(db, principal, recipe_id, data)
    return redact_for(principal, recipe)


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_recipe(
    recipe_id: str,
    principal: AuthenticatedPrincipal,
    db: DbSession,
    reason: Optional[str] = Query(None, max_length=500),
):
    """Soft delete: the recipe disappears from every non-admin read"""
    recipe_service.soft_delete_recipe(db, principal, recipe_id, reason=reason)


@router.post("/{recipe_id}/restore", response_model=RecipeResponse)
def restore_recipe(
    recipe_id: str,
    principal: AuthenticatedPrincipal,
    db: DbSession,
    reason: Optional[str] = Query(None, max_length=500),
):
    recipe = recipe_service.restore_recipe(db, principal, recipe_id, reason=reason)
    return redact_for(principal, recipe)


@router.get("/{recipe_id}/nutrition", response_model=NutritionFacts)
def get_nutrition(recipe_id: str, principal: RequestPrincipal, db: DbSession):
    return nutrition_service.get_nutrition(db, principal, recipe_id)


@router.post("/{recipe_id}/favorite", response_model=FavoriteStatus, status_code=status.HTTP_201_CREATED)
def add_favorite(recipe_id: str, principal: AuthenticatedPrincipal, db: DbSession):
    recipe = favorite_service.add_favorite(db, principal, recipe_id)
    return FavoriteStatus(recipe_id=recipe.id, favorited=True, favorite_count=recipe.favorite_count)


@router.delete("/{recipe_id}/favorite", response_model=FavoriteStatus)
def remove_favorite(recipe_id: str, principal: AuthenticatedPrincipal, db: DbSession):
    recipe = favorite_service.remove_favorite(db, principal, recipe_id)
    return FavoriteStatus(recipe_id=recipe.id, favorited=False, favorite_count=recipe.favorite_count)


@router.get("/{recipe_id}/reviews", response_model=List[ReviewResponse])
def list_reviews(recipe_id: str, principal: RequestPrincipal, db: DbSession, pagination: PaginationParams):
    return review_service.list_reviews(
        db, principal, recipe_id, limit=pagination["limit"], offset=pagination["offset"]
    )


@router.post("/{recipe_id}/reviews", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def create_review(recipe_id: str, data: ReviewCreate, principal: AuthenticatedPrincipal, db: DbSession):
    return review_service.create_review(db, principal, recipe_id, data)
