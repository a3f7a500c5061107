"""
Recipe Share Database Models
Central import module for all database models
"""

from .users import User, UserPreference, UserRole
from .recipe_models import Recipe, Ingredient, RecipeIngredient, RecipeNutrition
from .social_models import Favorite, Collection, CollectionRecipe, Review
from .chat_models import ChatConversation, ChatMessage
from .audit_models import AdminAction, ActivityLog

__all__ = [
    # User models
    "User",
    "UserPreference",
    "UserRole",

    # Recipe models
    "Recipe",
    "Ingredient",
    "RecipeIngredient",
    "RecipeNutrition",

    # Social models
    "Favorite",
    "Collection",
    "CollectionRecipe",
    "Review",

    # Chat models
    "ChatConversation",
    "ChatMessage",

    # Audit models
    "AdminAction",
    "ActivityLog",
]
