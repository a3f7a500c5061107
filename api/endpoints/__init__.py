"""
Recipe Share API Endpoints
All API endpoint modules
"""

# Import all endpoint modules
from . import health, auth, users, recipes, reviews, favorites, collections, chat, admin

__all__ = [
    "health",
    "auth",
    "users",
    "recipes",
    "reviews",
    "favorites",
    "collections",
    "chat",
    "admin"
]
