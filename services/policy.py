"""
Recipe Share Authorization Policy
Row-level grant rules evaluated in-process before every store access

Grants are additive: an operation is allowed when any grant registered for
the (entity type, operation) pair returns True. There is no explicit deny.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Union

import structlog
from sqlalchemy import and_, false, or_, select, true

from core.exceptions import Forbidden, NotFound, Unauthorized
from core.monitoring import record_denial
from models.chat_models import ChatConversation
from models.recipe_models import Recipe
from models.social_models import Collection, Review
from models.users import User, UserRole

logger = structlog.get_logger()


class Operation(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class EntityType(str, Enum):
    RECIPE = "recipe"
    FAVORITE = "favorite"
    COLLECTION = "collection"
    COLLECTION_RECIPE = "collection_recipe"
    REVIEW = "review"
    ACTIVITY_LOG = "activity_log"
    ADMIN_ACTION = "admin_action"
    CHAT_CONVERSATION = "chat_conversation"
    USER = "user"


class DenyReason(str, Enum):
    NOT_AUTHENTICATED = "not-authenticated"
    NOT_OWNER = "not-owner"
    NOT_ADMIN = "not-admin"
    TARGET_PRIVATE = "target-private"
    TARGET_NOT_FOUND_OR_DELETED = "target-not-found-or-deleted"


@dataclass(frozen=True)
class Principal:
    """Identity (or anonymity) on whose behalf an operation runs"""

    user_id: Optional[str] = None
    role: UserRole = UserRole.GUEST
    session_id: Optional[str] = None

    @classmethod
    def anonymous(cls, session_id: Optional[str] = None) -> "Principal":
        return cls(session_id=session_id)

    @classmethod
    def for_user(cls, user: Optional[User], session_id: Optional[str] = None) -> "Principal":
        if user is None or not user.is_active:
            return cls.anonymous(session_id)
        return cls(user_id=str(user.id), role=user.role)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.role == UserRole.ADMIN


@dataclass(frozen=True)
class Allow:
    @property
    def allowed(self) -> bool:
        return True


@dataclass(frozen=True)
class Deny:
    reason: DenyReason

    @property
    def allowed(self) -> bool:
        return False


Decision = Union[Allow, Deny]
Grant = Callable[[Principal, Any], bool]


# Grant predicates

def _owned_by(attribute: str) -> Grant:
    def grant(principal: Principal, entity: Any) -> bool:
        if entity is None or not principal.is_authenticated:
            return False
        owner = getattr(entity, attribute, None)
        return owner is not None and str(owner) == principal.user_id
    grant.__name__ = f"owned_by_{attribute}"
    return grant


def _is_admin(principal: Principal, entity: Any) -> bool:
    return principal.is_admin


def _recipe_is_listed(principal: Principal, entity: Any) -> bool:
    return entity is not None and entity.is_public is True and not entity.is_deleted


def _collection_is_public(principal: Principal, entity: Any) -> bool:
    return entity is not None and entity.is_public is True


def _review_target_is_public(principal: Principal, entity: Any) -> bool:
    recipe = getattr(entity, "recipe", None) if entity is not None else None
    return recipe is not None and recipe.is_public is True


def _parent_collection(grant: Grant) -> Grant:
    def wrapped(principal: Principal, entity: Any) -> bool:
        collection = getattr(entity, "collection", None) if entity is not None else None
        return collection is not None and grant(principal, collection)
    return wrapped


def _adds_as_self(principal: Principal, entity: Any) -> bool:
    return (
        entity is not None
        and _parent_collection(_owned_by("owner_id"))(principal, entity)
        and (entity.added_by is None or str(entity.added_by) == principal.user_id)
    )


def _conversation_participant(principal: Principal, entity: Any) -> bool:
    if entity is None:
        return False
    if entity.user_id is not None:
        return principal.is_authenticated and str(entity.user_id) == principal.user_id
    # Guest rows belong to the anonymous session that opened them
    return (
        not principal.is_authenticated
        and principal.session_id is not None
        and entity.session_id == principal.session_id
    )


def _is_self(principal: Principal, entity: Any) -> bool:
    return entity is not None and principal.is_authenticated and str(entity.id) == principal.user_id


_owner = _owned_by("owner_id")
_user = _owned_by("user_id")
_author = _owned_by("author_id")

GRANTS: Dict[Tuple[EntityType, Operation], Tuple[Grant, ...]] = {
    (EntityType.RECIPE, Operation.READ): (_recipe_is_listed, _owner, _is_admin),
    (EntityType.RECIPE, Operation.CREATE): (_owner,),
    (EntityType.RECIPE, Operation.UPDATE): (_owner, _is_admin),
    (EntityType.RECIPE, Operation.DELETE): (_owner, _is_admin),

    (EntityType.FAVORITE, Operation.READ): (_user,),
    (EntityType.FAVORITE, Operation.CREATE): (_user,),
    (EntityType.FAVORITE, Operation.UPDATE): (_user,),
    (EntityType.FAVORITE, Operation.DELETE): (_user,),

    (EntityType.COLLECTION, Operation.READ): (_collection_is_public, _owner),
    (EntityType.COLLECTION, Operation.CREATE): (_owner,),
    (EntityType.COLLECTION, Operation.UPDATE): (_owner,),
    (EntityType.COLLECTION, Operation.DELETE): (_owner,),

    (EntityType.COLLECTION_RECIPE, Operation.READ): (
        _parent_collection(_collection_is_public), _parent_collection(_owner),
    ),
    (EntityType.COLLECTION_RECIPE, Operation.CREATE): (_adds_as_self,),
    (EntityType.COLLECTION_RECIPE, Operation.UPDATE): (_parent_collection(_owner),),
    (EntityType.COLLECTION_RECIPE, Operation.DELETE): (_parent_collection(_owner),),

    (EntityType.REVIEW, Operation.READ): (_review_target_is_public, _author),
    (EntityType.REVIEW, Operation.CREATE): (_author,),
    (EntityType.REVIEW, Operation.UPDATE): (_author,),
    (EntityType.REVIEW, Operation.DELETE): (_author,),

    (EntityType.ACTIVITY_LOG, Operation.READ): (_user,),
    (EntityType.ACTIVITY_LOG, Operation.CREATE): (_user,),

    (EntityType.ADMIN_ACTION, Operation.READ): (_is_admin,),
    (EntityType.ADMIN_ACTION, Operation.CREATE): (_is_admin,),

    (EntityType.CHAT_CONVERSATION, Operation.READ): (_conversation_participant,),
    (EntityType.CHAT_CONVERSATION, Operation.CREATE): (_conversation_participant,),
    (EntityType.CHAT_CONVERSATION, Operation.UPDATE): (_conversation_participant,),
    (EntityType.CHAT_CONVERSATION, Operation.DELETE): (_conversation_participant,),

    (EntityType.USER, Operation.READ): (_is_self, _is_admin),
    (EntityType.USER, Operation.UPDATE): (_is_self, _is_admin),
    (EntityType.USER, Operation.DELETE): (_is_admin,),
}

# Pairs whose only grant is the admin role; a denial names the missing role
ADMIN_ONLY = {
    (EntityType.ADMIN_ACTION, Operation.READ),
    (EntityType.ADMIN_ACTION, Operation.CREATE),
    (EntityType.USER, Operation.DELETE),
}

# Guests may open and use chat conversations without signing in
ANONYMOUS_WRITABLE = {EntityType.CHAT_CONVERSATION}


def _deny_reason(
    principal: Principal, operation: Operation, entity_type: EntityType, entity: Any
) -> DenyReason:
    if (entity_type, operation) in ADMIN_ONLY:
        if not principal.is_authenticated:
            return DenyReason.NOT_AUTHENTICATED
        return DenyReason.NOT_ADMIN

    # Absence and invisibility must be indistinguishable on reads
    if operation is Operation.READ:
        return DenyReason.TARGET_NOT_FOUND_OR_DELETED

    if not principal.is_authenticated and entity_type not in ANONYMOUS_WRITABLE:
        return DenyReason.NOT_AUTHENTICATED

    if entity is None:
        return DenyReason.TARGET_NOT_FOUND_OR_DELETED

    if operation is not Operation.CREATE and (entity_type, Operation.READ) in GRANTS:
        if not authorize(principal, Operation.READ, entity_type, entity).allowed:
            if getattr(entity, "is_deleted", False):
                return DenyReason.TARGET_NOT_FOUND_OR_DELETED
            return DenyReason.TARGET_PRIVATE

    return DenyReason.NOT_OWNER


def authorize(
    principal: Principal, operation: Operation, entity_type: EntityType, entity: Any = None
) -> Decision:
    """
    Decide whether principal may perform operation on entity.

    For creates, entity is the proposed row. Pure: reads only the
    principal and the entity snapshot (plus loaded parents such as
    review.recipe or collection_recipe.collection).
    """
    for grant in GRANTS.get((entity_type, operation), ()):
        if grant(principal, entity):
            return Allow()
    return Deny(_deny_reason(principal, operation, entity_type, entity))


def enforce(
    principal: Principal, operation: Operation, entity_type: EntityType, entity: Any = None
) -> Any:
    """
    Authorize and raise the mapped error on denial; returns entity when allowed.
    """
    decision = authorize(principal, operation, entity_type, entity)
    if decision.allowed:
        return entity

    logger.info(
        "Policy denied",
        entity_type=entity_type.value,
        operation=operation.value,
        reason=decision.reason.value,
        user_id=principal.user_id,
        event_type="policy_denied",
    )
    record_denial(entity_type.value, operation.value, decision.reason.value)

    reason = decision.reason
    if reason is DenyReason.NOT_AUTHENTICATED:
        raise Unauthorized(reason=reason.value)
    if reason in (DenyReason.TARGET_PRIVATE, DenyReason.TARGET_NOT_FOUND_OR_DELETED):
        raise NotFound()
    if reason is DenyReason.NOT_ADMIN:
        raise Forbidden("Admin access required", reason=reason.value)
    raise Forbidden(reason=reason.value)


def require_authenticated(principal: Principal) -> Principal:
    if not principal.is_authenticated:
        raise Unauthorized(reason=DenyReason.NOT_AUTHENTICATED.value)
    return principal


# Query-side equivalents of the read grants, for list endpoints

def visible_recipes_clause(principal: Principal):
    if principal.is_admin:
        return true()
    listed = and_(Recipe.is_public.is_(True), Recipe.is_deleted.is_(False))
    if principal.is_authenticated:
        return or_(listed, Recipe.owner_id == principal.user_id)
    return listed


def visible_collections_clause(principal: Principal):
    if principal.is_authenticated:
        return or_(Collection.is_public.is_(True), Collection.owner_id == principal.user_id)
    return Collection.is_public.is_(True)


def visible_reviews_clause(principal: Principal):
    public_target = Review.recipe_id.in_(select(Recipe.id).where(Recipe.is_public.is_(True)))
    if principal.is_authenticated:
        return or_(public_target, Review.author_id == principal.user_id)
    return public_target


def visible_conversations_clause(principal: Principal):
    if principal.is_authenticated:
        return ChatConversation.user_id == principal.user_id
    if principal.session_id:
        return and_(ChatConversation.user_id.is_(None), ChatConversation.session_id == principal.session_id)
    return false()
