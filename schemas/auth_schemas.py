"""
Recipe Share Authentication Schemas
Pydantic models for authentication requests and responses
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from models.users import UserRole


class UserBase(BaseModel):
    """Base user schema with common fields"""
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    full_name: Optional[str] = Field(None, max_length=255)


class UserCreate(UserBase):
    """Schema for user registration"""
    password: str = Field(..., min_length=8, max_length=72)


class UserLogin(BaseModel):
    """Schema for user login"""
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """Schema for authentication token response"""
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class User(BaseModel):
    """Schema for user response"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: EmailStr
    username: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime
    last_login_at: Optional[datetime] = None


class UserUpdate(BaseModel):
    """Schema for user profile updates"""
    full_name: Optional[str] = Field(None, max_length=255)
    avatar_url: Optional[str] = Field(None, max_length=500)
    theme: Optional[str] = Field(None, pattern="^(light|dark|system)$")
    default_recipe_visibility: Optional[str] = Field(None, pattern="^(public|private)$")
    email_notifications: Optional[bool] = None
    dietary_restrictions: Optional[List[str]] = None
    favorite_cuisines: Optional[List[str]] = None

    @field_validator("dietary_restrictions", "favorite_cuisines")
    @classmethod
    def strip_entries(cls, v):
        if v is None:
            return v
        return [item.strip().lower() for item in v if item and item.strip()]


class AuthResponse(BaseModel):
    """Schema for authentication response"""
    user: User
    tokens: TokenResponse
    message: str = "Authentication successful"
