"""
Recipe Share Services Module
Business operations guarded by the authorization policy
"""

from .policy import (
    Allow, Deny, DenyReason, EntityType, Operation, Principal, authorize, enforce,
)
from .auth_service import AuthService, auth_service
from .recipe_service import RecipeService, recipe_service
from .nutrition_service import NutritionService, nutrition_service
from .collection_service import CollectionService, collection_service
from .review_service import ReviewService, review_service
from .chat_service import ChatService, chat_service
from .maintenance_service import SweepResult, purge_expired_guest_conversations, reconcile_counters

__all__ = [
    # Policy
    "Allow",
    "Deny",
    "DenyReason",
    "EntityType",
    "Operation",
    "Principal",
    "authorize",
    "enforce",

    # Services
    "AuthService",
    "auth_service",
    "RecipeService",
    "recipe_service",
    "NutritionService",
    "nutrition_service",
    "CollectionService",
    "collection_service",
    "ReviewService",
    "review_service",
    "ChatService",
    "chat_service",

    # Maintenance
    "SweepResult",
    "purge_expired_guest_conversations",
    "reconcile_counters",
]
