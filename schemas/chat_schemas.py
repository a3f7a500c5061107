"""
Recipe Share Chat Schemas
"""

from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class ConversationCreate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=4000)
    role: str = Field("user", pattern="^(user|assistant)$")
    recipe_context_id: Optional[str] = None
    tokens_used: Optional[int] = Field(None, ge=0)


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    conversation_id: str
    role: str
    content: str
    recipe_context_id: Optional[str] = None
    created_at: datetime


class ConversationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    title: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    expires_at: Optional[datetime] = None


class ConversationDetailResponse(ConversationResponse):
    messages: List[MessageResponse] = Field(default_factory=list)
