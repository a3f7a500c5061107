"""
Recipe Share Audit Models
Admin action audit trail and per-user activity log
"""

from sqlalchemy import String, Text, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from datetime import datetime
from typing import Optional
import uuid

from core.database import Base


class AdminAction(Base):
    """Append-only record of an admin mutation"""
    __tablename__ = "admin_actions"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()))
    admin_id: Mapped[Optional[str]] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    action_type: Mapped[str] = mapped_column(String(50), nullable=False)  # delete_recipe, change_role, ...
    target_type: Mapped[str] = mapped_column(String(50), nullable=False)  # recipe, user, review
    target_id: Mapped[str] = mapped_column(String(36), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    details: Mapped[Optional[dict]] = mapped_column("metadata", JSON, nullable=True)
    performed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )

    def __repr__(self):
        return f"<AdminAction(action_type={self.action_type}, target={self.target_type}:{self.target_id})>"


class ActivityLog(Base):
    """User activity tracking"""
    __tablename__ = "user_activity_log"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[Optional[str]] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True
    )
    activity_type: Mapped[str] = mapped_column(String(50), nullable=False)  # view_recipe, favorite, ...
    recipe_id: Mapped[Optional[str]] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("recipes.id", ondelete="SET NULL"), nullable=True
    )
    details: Mapped[Optional[dict]] = mapped_column("metadata", JSON, nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )
