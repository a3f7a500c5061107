"""
Recipe Share Admin Schemas
Audit trail, role management and maintenance results
"""

from typing import Any, Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from models.users import UserRole


class AdminActionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    admin_id: Optional[str] = None
    action_type: str
    target_type: str
    target_id: str
    reason: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    performed_at: datetime


class AdminActionList(BaseModel):
    items: List[AdminActionResponse]
    total: int


class RoleChange(BaseModel):
    role: UserRole
    reason: Optional[str] = Field(None, max_length=500)


class ActionReason(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class ActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    activity_type: str
    recipe_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: datetime


class SweepResponse(BaseModel):
    expired_conversations_deleted: int
    expired_conversations_failed: int
    favorite_counts_fixed: int
    collection_counts_fixed: int
