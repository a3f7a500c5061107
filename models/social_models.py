"""
Recipe Share Social Models
Favorites, collections and reviews
"""

from sqlalchemy import Integer, String, Text, DateTime, ForeignKey, Boolean, Uuid, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func
from datetime import datetime
from typing import Optional
import uuid

from core.database import Base


class Favorite(Base):
    """A user's favorite recipe, unique per pair"""
    __tablename__ = "user_favorites"

    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    recipe_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    favorited_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    recipe = relationship("Recipe")

    def __repr__(self):
        return f"<Favorite(user_id={self.user_id}, recipe_id={self.recipe_id})>"


class Collection(Base):
    """Named folder of recipes"""
    __tablename__ = "collections"
    __table_args__ = (
        CheckConstraint("recipe_count >= 0", name="recipe_count_non_negative"),
    )

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id: Mapped[str] = mapped_column(
        "user_id", Uuid(as_uuid=False), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    cover_image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    recipe_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    entries = relationship(
        "CollectionRecipe",
        back_populates="collection",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Collection(id={self.id}, name={self.name}, public={self.is_public})>"


class CollectionRecipe(Base):
    """Membership of a recipe in a collection"""
    __tablename__ = "collection_recipes"

    collection_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("collections.id", ondelete="CASCADE"), primary_key=True
    )
    recipe_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True
    )
    added_by: Mapped[Optional[str]] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    collection = relationship("Collection", back_populates="entries")
    recipe = relationship("Recipe")


class Review(Base):
    """One review per user per recipe"""
    __tablename__ = "recipe_reviews"
    __table_args__ = (
        UniqueConstraint("recipe_id", "user_id", name="uq_recipe_reviews_recipe_user"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="rating_range"),
    )

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()))
    recipe_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author_id: Mapped[str] = mapped_column(
        "user_id", Uuid(as_uuid=False), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    review_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    would_make_again: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    recipe = relationship("Recipe")

    def __repr__(self):
        return f"<Review(id={self.id}, recipe_id={self.recipe_id}, rating={self.rating})>"
