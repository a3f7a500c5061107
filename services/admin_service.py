"""
Recipe Share Admin Service
Audit trail, role management and account removal
"""

from typing import Any, Dict, List, Optional, Tuple

import structlog
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import Session

from core.database import transaction
from core.exceptions import NotFound, ValidationFailed
from models.audit_models import ActivityLog, AdminAction
from models.chat_models import ChatConversation, ChatMessage
from models.recipe_models import Recipe, RecipeIngredient, RecipeNutrition
from models.social_models import Collection, CollectionRecipe, Favorite, Review
from models.users import User, UserPreference, UserRole
from services.collection_service import reconcile_collection_counts
from services.favorite_service import reconcile_favorite_counts
from services.policy import EntityType, Operation, Principal, enforce
from utils.date_utils import utcnow

logger = structlog.get_logger()


def _bulk(db: Session, statement):
    return db.execute(statement, execution_options={"synchronize_session": False})


def record_admin_action(
    db: Session,
    principal: Principal,
    action_type: str,
    target_type: EntityType,
    target_id: str,
    reason: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> AdminAction:
    """Stage an audit row in the caller's transaction (admin only)"""
    enforce(principal, Operation.CREATE, EntityType.ADMIN_ACTION)

    action = AdminAction(
        admin_id=principal.user_id,
        action_type=action_type,
        target_type=target_type.value,
        target_id=str(target_id),
        reason=reason,
        details=details,
        performed_at=utcnow(),
    )
    db.add(action)

    logger.info(
        "Admin action recorded",
        admin_id=principal.user_id,
        action_type=action_type,
        target_type=target_type.value,
        target_id=str(target_id),
        event_type="admin_action",
    )
    return action


def list_admin_actions(
    db: Session,
    principal: Principal,
    action_type: Optional[str] = None,
    target_id: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> Tuple[List[AdminAction], int]:
    enforce(principal, Operation.READ, EntityType.ADMIN_ACTION)

    query = select(AdminAction)
    if action_type:
        query = query.where(AdminAction.action_type == action_type)
    if target_id:
        query = query.where(AdminAction.target_id == target_id)

    total = db.scalar(select(func.count()).select_from(query.subquery()))
    items = db.scalars(
        query.order_by(AdminAction.performed_at.desc(), AdminAction.id).limit(limit).offset(offset)
    ).all()
    return list(items), total or 0


def _get_target_user(db: Session, principal: Principal, user_id: str) -> User:
    # Callers have passed the admin check already, so absence is safe to report
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    if str(user.id) == principal.user_id:
        raise ValidationFailed("Admins cannot change or remove their own account here")
    return user


def change_user_role(
    db: Session, principal: Principal, user_id: str, role: UserRole, reason: Optional[str] = None
) -> User:
    enforce(principal, Operation.CREATE, EntityType.ADMIN_ACTION)
    user = _get_target_user(db, principal, user_id)
    previous = user.role

    with transaction(db):
        user.role = role
        user.updated_at = utcnow()
        record_admin_action(
            db, principal, "change_role", EntityType.USER, user.id,
            reason=reason, details={"from": previous.value, "to": role.value},
        )

    logger.info("User role changed", user_id=user.id, from_role=previous.value, to_role=role.value)
    return user


def deactivate_user(db: Session, principal: Principal, user_id: str, reason: Optional[str] = None) -> User:
    """Disable sign-in; the account and its content stay in place"""
    enforce(principal, Operation.CREATE, EntityType.ADMIN_ACTION)
    user = _get_target_user(db, principal, user_id)

    with transaction(db):
        user.is_active = False
        user.updated_at = utcnow()
        record_admin_action(db, principal, "deactivate_user", EntityType.USER, user.id, reason=reason)

    logger.info("User deactivated", user_id=user.id)
    return user


def hard_delete_user(db: Session, principal: Principal, user_id: str, reason: Optional[str] = None) -> Dict[str, int]:
    """
    Remove a user and everything they own in one transaction.

    Owned recipes, favorites, collections, reviews, conversations and
    activity rows go with the account. Favorite and recipe counters on
    rows that survive are recounted from what is left, and references
    kept only as history (deleted_by, added_by, admin_id) are cleared.
    """
    target = db.get(User, user_id)
    enforce(principal, Operation.DELETE, EntityType.USER, target)
    user = _get_target_user(db, principal, user_id)
    uid = user.id

    owned_recipes = select(Recipe.id).where(Recipe.owner_id == uid)
    owned_collections = select(Collection.id).where(Collection.owner_id == uid)
    owned_conversations = select(ChatConversation.id).where(ChatConversation.user_id == uid)

    with transaction(db):
        # Survivors whose counters depend on rows about to disappear
        favorited_elsewhere = db.scalars(
            select(Favorite.recipe_id).where(Favorite.user_id == uid, Favorite.recipe_id.not_in(owned_recipes))
        ).all()
        collections_elsewhere = db.scalars(
            select(CollectionRecipe.collection_id).where(
                CollectionRecipe.recipe_id.in_(owned_recipes),
                CollectionRecipe.collection_id.not_in(owned_collections),
            )
        ).all()

        counts = {}
        counts["favorites"] = _bulk(
            db, delete(Favorite).where(or_(Favorite.user_id == uid, Favorite.recipe_id.in_(owned_recipes)))
        ).rowcount
        counts["reviews"] = _bulk(
            db, delete(Review).where(or_(Review.author_id == uid, Review.recipe_id.in_(owned_recipes)))
        ).rowcount
        counts["collection_entries"] = _bulk(
            db, delete(CollectionRecipe).where(
                or_(
                    CollectionRecipe.collection_id.in_(owned_collections),
                    CollectionRecipe.recipe_id.in_(owned_recipes),
                )
            )
        ).rowcount
        counts["collections"] = _bulk(db, delete(Collection).where(Collection.owner_id == uid)).rowcount
        _bulk(db, delete(ChatMessage).where(ChatMessage.conversation_id.in_(owned_conversations)))
        counts["conversations"] = _bulk(
            db, delete(ChatConversation).where(ChatConversation.user_id == uid)
        ).rowcount

        # History rows keep existing without their link to removed rows
        _bulk(db, update(ActivityLog).where(ActivityLog.recipe_id.in_(owned_recipes)).values(recipe_id=None))
        _bulk(
            db, update(ChatMessage).where(ChatMessage.recipe_context_id.in_(owned_recipes)).values(recipe_context_id=None)
        )
        _bulk(db, update(Recipe).where(Recipe.deleted_by == uid).values(deleted_by=None))
        _bulk(db, update(CollectionRecipe).where(CollectionRecipe.added_by == uid).values(added_by=None))
        _bulk(db, update(AdminAction).where(AdminAction.admin_id == uid).values(admin_id=None))
        counts["activity"] = _bulk(db, delete(ActivityLog).where(ActivityLog.user_id == uid)).rowcount

        _bulk(db, delete(RecipeIngredient).where(RecipeIngredient.recipe_id.in_(owned_recipes)))
        _bulk(db, delete(RecipeNutrition).where(RecipeNutrition.recipe_id.in_(owned_recipes)))
        counts["recipes"] = _bulk(db, delete(Recipe).where(Recipe.owner_id == uid)).rowcount
        _bulk(db, delete(UserPreference).where(UserPreference.user_id == uid))
        _bulk(db, delete(User).where(User.id == uid))

        reconcile_favorite_counts(db, set(favorited_elsewhere))
        reconcile_collection_counts(db, set(collections_elsewhere))

        record_admin_action(db, principal, "delete_user", EntityType.USER, uid, reason=reason, details=counts)

    # Bulk deletes bypass the identity map
    db.expunge_all()

    logger.info("User hard-deleted", user_id=uid, admin_id=principal.user_id, **counts)
    return counts
