"""
Recipe Share Social Schemas
Favorites, collections and reviews
"""

from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator


class FavoriteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    recipe_id: str
    favorited_at: datetime


class FavoriteStatus(BaseModel):
    recipe_id: str
    favorited: bool
    favorite_count: int


class CollectionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    is_public: bool = False
    cover_image_url: Optional[str] = Field(None, max_length=500)


class CollectionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    is_public: Optional[bool] = None
    cover_image_url: Optional[str] = Field(None, max_length=500)

    @field_validator("name", "is_public")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class CollectionEntryIn(BaseModel):
    notes: Optional[str] = Field(None, max_length=2000)


class CollectionEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    collection_id: str
    recipe_id: str
    added_by: Optional[str] = None
    notes: Optional[str] = None
    added_at: datetime


class CollectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    name: str
    description: Optional[str] = None
    is_public: bool
    cover_image_url: Optional[str] = None
    recipe_count: int
    created_at: datetime
    updated_at: datetime


class CollectionDetailResponse(CollectionResponse):
    entries: List[CollectionEntryResponse] = Field(default_factory=list)


class ReviewCreate(BaseModel):
    rating: int
    review_text: Optional[str] = Field(None, max_length=5000)
    would_make_again: Optional[bool] = None


class ReviewUpdate(BaseModel):
    rating: Optional[int] = None
    review_text: Optional[str] = Field(None, max_length=5000)
    would_make_again: Optional[bool] = None


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    recipe_id: str
    author_id: str
    rating: int
    review_text: Optional[str] = None
    would_make_again: Optional[bool] = None
    created_at: datetime
    updated_at: datetime
