"""
Recipe Share Collection Service
Collections, their recipe entries and the recipe_count counter
"""

from typing import Iterable, List, Optional, Tuple

import structlog
from sqlalchemy import case, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import transaction
from core.exceptions import Conflict, NotFound
from models.recipe_models import Recipe
from models.social_models import Collection, CollectionRecipe
from schemas.social_schemas import CollectionCreate, CollectionUpdate
from services.policy import (
    EntityType, Operation, Principal, authorize, enforce, require_authenticated, visible_collections_clause,
)
from utils.date_utils import utcnow

logger = structlog.get_logger()


def _bump_recipe_count(db: Session, collection_id: str, delta: int) -> None:
    if delta >= 0:
        new_value = Collection.recipe_count + delta
    else:
        new_value = case(
            (Collection.recipe_count + delta < 0, 0),
            else_=Collection.recipe_count + delta,
        )
    db.execute(
        update(Collection)
        .where(Collection.id == collection_id)
        .values(recipe_count=new_value, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )


class CollectionService:
    """Collection CRUD and membership"""

    def create_collection(self, db: Session, principal: Principal, data: CollectionCreate) -> Collection:
        require_authenticated(principal)
        now = utcnow()
        collection = Collection(
            owner_id=principal.user_id,
            name=data.name,
            description=data.description,
            is_public=data.is_public,
            cover_image_url=data.cover_image_url,
            recipe_count=0,
            created_at=now,
            updated_at=now,
        )
        enforce(principal, Operation.CREATE, EntityType.COLLECTION, collection)

        with transaction(db):
            db.add(collection)

        logger.info("Collection created", collection_id=collection.id, user_id=principal.user_id)
        return collection

    def get_collection(self, db: Session, principal: Principal, collection_id: str) -> Collection:
        return enforce(principal, Operation.READ, EntityType.COLLECTION, db.get(Collection, collection_id))

    def list_collections(
        self,
        db: Session,
        principal: Principal,
        owner_id: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Collection], int]:
        query = select(Collection).where(visible_collections_clause(principal))
        if owner_id:
            query = query.where(Collection.owner_id == owner_id)

        total = db.scalar(select(func.count()).select_from(query.subquery()))
        items = db.scalars(
            query.order_by(Collection.updated_at.desc(), Collection.id).offset((page - 1) * limit).limit(limit)
        ).all()
        return list(items), total or 0

    def update_collection(
        self, db: Session, principal: Principal, collection_id: str, data: CollectionUpdate
    ) -> Collection:
        collection = enforce(principal, Operation.UPDATE, EntityType.COLLECTION, db.get(Collection, collection_id))
        changes = data.model_dump(exclude_unset=True)

        with transaction(db):
            for field, value in changes.items():
                setattr(collection, field, value)
            collection.updated_at = utcnow()

        logger.info("Collection updated", collection_id=collection.id, fields=sorted(changes))
        return collection

    def delete_collection(self, db: Session, principal: Principal, collection_id: str) -> None:
        collection = enforce(principal, Operation.DELETE, EntityType.COLLECTION, db.get(Collection, collection_id))

        with transaction(db):
            db.delete(collection)

        logger.info("Collection deleted", collection_id=collection_id, user_id=principal.user_id)

    def visible_entries(self, principal: Principal, collection: Collection) -> List[CollectionRecipe]:
        """Entries whose recipe the caller may also read"""
        return [
            entry for entry in collection.entries
            if authorize(principal, Operation.READ, EntityType.COLLECTION_RECIPE, entry).allowed
            and entry.recipe is not None
            and authorize(principal, Operation.READ, EntityType.RECIPE, entry.recipe).allowed
            and not entry.recipe.is_deleted
        ]

    def add_recipe(
        self,
        db: Session,
        principal: Principal,
        collection_id: str,
        recipe_id: str,
        notes: Optional[str] = None,
    ) -> CollectionRecipe:
        collection = db.get(Collection, collection_id)
        enforce(principal, Operation.UPDATE, EntityType.COLLECTION, collection)

        # Owners can only file recipes they can see
        recipe = enforce(principal, Operation.READ, EntityType.RECIPE, db.get(Recipe, recipe_id))
        if recipe.is_deleted:
            raise NotFound()

        if db.get(CollectionRecipe, (collection.id, recipe.id)) is not None:
            raise Conflict("Recipe is already in this collection")

        entry = CollectionRecipe(
            collection_id=collection.id,
            recipe_id=recipe.id,
            added_by=principal.user_id,
            notes=notes,
            added_at=utcnow(),
        )
        entry.collection = collection
        enforce(principal, Operation.CREATE, EntityType.COLLECTION_RECIPE, entry)

        try:
            with transaction(db):
                db.add(entry)
                db.flush()
                _bump_recipe_count(db, collection.id, 1)
        except IntegrityError:
            raise Conflict("Recipe is already in this collection")

        db.refresh(collection)
        logger.info("Recipe added to collection", collection_id=collection.id, recipe_id=recipe.id,
                    recipe_count=collection.recipe_count)
        return entry

    def remove_recipe(self, db: Session, principal: Principal, collection_id: str, recipe_id: str) -> Collection:
        collection = db.get(Collection, collection_id)
        enforce(principal, Operation.READ, EntityType.COLLECTION, collection)
        entry = db.get(CollectionRecipe, (collection.id, recipe_id))
        enforce(principal, Operation.DELETE, EntityType.COLLECTION_RECIPE, entry)

        with transaction(db):
            result = db.execute(
                delete(CollectionRecipe)
                .where(CollectionRecipe.collection_id == collection.id, CollectionRecipe.recipe_id == recipe_id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount:
                _bump_recipe_count(db, collection.id, -1)
        db.expunge(entry)

        db.refresh(collection)
        logger.info("Recipe removed from collection", collection_id=collection.id, recipe_id=recipe_id,
                    recipe_count=collection.recipe_count)
        return collection


def reconcile_collection_counts(db: Session, collection_ids: Optional[Iterable[str]] = None) -> int:
    """Recompute recipe_count from the entry rows; caller owns the transaction"""
    actual = (
        select(func.count())
        .select_from(CollectionRecipe)
        .where(CollectionRecipe.collection_id == Collection.id)
        .correlate(Collection)
        .scalar_subquery()
    )
    stmt = update(Collection).where(Collection.recipe_count != actual).values(recipe_count=actual)
    if collection_ids is not None:
        ids = list(collection_ids)
        if not ids:
            return 0
        stmt = stmt.where(Collection.id.in_(ids))

    result = db.execute(stmt.execution_options(synchronize_session=False))
    if result.rowcount:
        logger.warning("Collection counts reconciled", collections_fixed=result.rowcount)
    return result.rowcount or 0


# Create singleton instance
collection_service = CollectionService()
