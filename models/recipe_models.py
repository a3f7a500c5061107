"""
Recipe Share Recipe Models
Database models for recipes, the ingredient catalogue and nutrition facts
"""

from sqlalchemy import (
    Integer, String, Text, Numeric, DateTime, ForeignKey, Boolean, JSON, Uuid,
    CheckConstraint, UniqueConstraint,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func
from datetime import datetime
from decimal import Decimal
from typing import Optional
import uuid

from core.database import Base


class Recipe(Base):
    """Recipe owned by one user, public or private, soft-deletable"""
    __tablename__ = "recipes"
    __table_args__ = (
        CheckConstraint("favorite_count >= 0", name="favorite_count_non_negative"),
        CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)", name="rating_range"),
    )

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id: Mapped[str] = mapped_column(
        "user_id", Uuid(as_uuid=False), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    instructions: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)  # List of instruction steps
    prep_time_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    cook_time_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    servings: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    difficulty_level: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)  # easy, medium, hard
    cuisine_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    meal_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    source_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    source_type: Mapped[str] = mapped_column(String(20), default="manual", nullable=False)

    # Visibility
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)

    # Derived counters
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    favorite_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Owner-only tracking
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    times_cooked: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Soft delete
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_by: Mapped[Optional[str]] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Relationships
    ingredients = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeIngredient.display_order",
    )
    nutrition = relationship("RecipeNutrition", back_populates="recipe", uselist=False, cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Recipe(id={self.id}, title={self.title}, public={self.is_public}, deleted={self.is_deleted})>"

    @property
    def total_time_minutes(self) -> Optional[int]:
        if self.prep_time_minutes is None and self.cook_time_minutes is None:
            return None
        return (self.prep_time_minutes or 0) + (self.cook_time_minutes or 0)


class Ingredient(Base):
    """Master ingredient catalogue with nutrition per 100 g"""
    __tablename__ = "ingredients"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    common_unit: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    grams_per_unit: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)

    calories_per_100g: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    protein_per_100g: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    fat_per_100g: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    carbs_per_100g: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    fiber_per_100g: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Ingredient(name={self.name}, category={self.category})>"


class RecipeIngredient(Base):
    """Ingredient line of a recipe"""
    __tablename__ = "recipe_ingredients"
    __table_args__ = (
        UniqueConstraint("recipe_id", "ingredient_id", name="uq_recipe_ingredients_recipe_ingredient"),
    )

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()))
    recipe_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    ingredient_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("ingredients.id"), nullable=False, index=True
    )
    quantity: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 3), nullable=True)
    unit: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    preparation: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_optional: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Relationships
    recipe = relationship("Recipe", back_populates="ingredients")
    ingredient = relationship("Ingredient", lazy="joined")

    @property
    def name(self) -> str:
        return self.ingredient.name if self.ingredient else ""

    def __repr__(self):
        return f"<RecipeIngredient(recipe_id={self.recipe_id}, ingredient_id={self.ingredient_id})>"


class RecipeNutrition(Base):
    """Pre-calculated nutrition facts per serving"""
    __tablename__ = "recipe_nutrition"

    recipe_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True
    )
    calories_per_serving: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    protein_per_serving: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    fat_per_serving: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    carbs_per_serving: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    fiber_per_serving: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    calculated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    recipe = relationship("Recipe", back_populates="nutrition")
