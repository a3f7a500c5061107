"""
Recipe Share Chat Models
Chatbot conversations owned by a user or by a guest session
"""

from sqlalchemy import Integer, String, Text, DateTime, ForeignKey, Uuid, CheckConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func
from datetime import datetime
from typing import Optional
import uuid

from core.database import Base


class ChatConversation(Base):
    """Conversation owned by exactly one of user_id or session_id"""
    __tablename__ = "chat_conversations"
    __table_args__ = (
        CheckConstraint(
            "(user_id IS NULL AND session_id IS NOT NULL) OR (user_id IS NOT NULL AND session_id IS NULL)",
            name="owner_xor_session",
        ),
    )

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[Optional[str]] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True
    )
    session_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, index=True)

    messages = relationship(
        "ChatMessage",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="ChatMessage.created_at",
    )

    def __repr__(self):
        return f"<ChatConversation(id={self.id}, user_id={self.user_id}, guest={self.is_guest})>"

    @property
    def is_guest(self) -> bool:
        return self.user_id is None


class ChatMessage(Base):
    """Single chat message"""
    __tablename__ = "chat_messages"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()))
    conversation_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("chat_conversations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)  # user, assistant
    content: Mapped[str] = mapped_column(Text, nullable=False)
    recipe_context_id: Mapped[Optional[str]] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("recipes.id", ondelete="SET NULL"), nullable=True
    )
    tokens_used: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    conversation = relationship("ChatConversation", back_populates="messages")
