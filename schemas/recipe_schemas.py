"""
Recipe Share Recipe Schemas
Pydantic models for recipe API requests and responses
"""

from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum


class DifficultyLevel(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class SourceType(str, Enum):
    API = "api"
    SCRAPED = "scraped"
    MANUAL = "manual"
    AI_GENERATED = "ai_generated"


class RecipeIngredientIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    quantity: Optional[Decimal] = Field(None, ge=0)
    unit: Optional[str] = Field(None, max_length=50)
    preparation: Optional[str] = Field(None, max_length=255)
    is_optional: bool = False


class RecipeBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    instructions: List[str] = Field(default_factory=list)
    prep_time_minutes: Optional[int] = Field(None, ge=0, le=10000)
    cook_time_minutes: Optional[int] = Field(None, ge=0, le=10000)
    servings: int = Field(1, ge=1, le=100)
    difficulty_level: Optional[DifficultyLevel] = None
    cuisine_type: Optional[str] = Field(None, max_length=100)
    meal_type: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = Field(None, max_length=500)
    source_url: Optional[str] = Field(None, max_length=500)
    is_public: bool = False

    @field_validator("instructions")
    @classmethod
    def drop_blank_steps(cls, v):
        return [step.strip() for step in v if step and step.strip()]


class RecipeCreate(RecipeBase):
    source_type: SourceType = SourceType.MANUAL
    ingredients: List[RecipeIngredientIn] = Field(default_factory=list)


class RecipeUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    instructions: Optional[List[str]] = None
    prep_time_minutes: Optional[int] = Field(None, ge=0, le=10000)
    cook_time_minutes: Optional[int] = Field(None, ge=0, le=10000)
    servings: Optional[int] = Field(None, ge=1, le=100)
    difficulty_level: Optional[DifficultyLevel] = None
    cuisine_type: Optional[str] = Field(None, max_length=100)
    meal_type: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = Field(None, max_length=500)
    is_public: Optional[bool] = None
    notes: Optional[str] = None
    rating: Optional[int] = None
    ingredients: Optional[List[RecipeIngredientIn]] = None
    reason: Optional[str] = Field(None, max_length=500)  # recorded when an admin edits

    @field_validator("title", "instructions", "servings", "is_public")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class RecipeIngredientOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    quantity: Optional[Decimal] = None
    unit: Optional[str] = None
    preparation: Optional[str] = None
    is_optional: bool = False


class NutritionFacts(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    recipe_id: str
    calories_per_serving: Optional[Decimal] = None
    protein_per_serving: Optional[Decimal] = None
    fat_per_serving: Optional[Decimal] = None
    carbs_per_serving: Optional[Decimal] = None
    fiber_per_serving: Optional[Decimal] = None
    calculated_at: Optional[datetime] = None


class RecipeSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    title: str
    description: Optional[str] = None
    cuisine_type: Optional[str] = None
    meal_type: Optional[str] = None
    difficulty_level: Optional[str] = None
    image_url: Optional[str] = None
    is_public: bool
    view_count: int
    favorite_count: int
    created_at: datetime


class RecipeResponse(RecipeSummary):
    instructions: List[str] = Field(default_factory=list)
    prep_time_minutes: Optional[int] = None
    cook_time_minutes: Optional[int] = None
    total_time_minutes: Optional[int] = None
    servings: int
    source_url: Optional[str] = None
    source_type: str
    ingredients: List[RecipeIngredientOut] = Field(default_factory=list)
    updated_at: datetime
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None

    # Owner-only fields, blanked for other readers by the endpoint
    notes: Optional[str] = None
    rating: Optional[int] = None
    times_cooked: int = 0

    @field_validator("instructions", mode="before")
    @classmethod
    def none_to_list(cls, v):
        return v or []


class RecipeListResponse(BaseModel):
    items: List[RecipeSummary]
    total: int
    page: int
    limit: int
