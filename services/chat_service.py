"""
Recipe Share Chat Service
Chatbot conversations for signed-in users and guest sessions
"""

from typing import List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from core.config import get_settings
from core.database import transaction
from core.exceptions import NotFound, ValidationFailed
from models.chat_models import ChatConversation, ChatMessage
from models.recipe_models import Recipe
from schemas.chat_schemas import ConversationCreate, MessageCreate
from services.policy import (
    EntityType, Operation, Principal, authorize, enforce, visible_conversations_clause,
)
from utils.date_utils import expiry_from, is_expired, utcnow
from utils.security import SecurityUtils

settings = get_settings()
security_utils = SecurityUtils()
logger = structlog.get_logger()


class ChatService:
    """
    Conversations are owned by exactly one of a user or a guest session.
    Guest conversations expire GUEST_CHAT_TTL_HOURS after they start and
    are removed by the maintenance sweep.
    """

    def start_conversation(
        self, db: Session, principal: Principal, data: Optional[ConversationCreate] = None
    ) -> ChatConversation:
        now = utcnow()
        title = data.title if data else None

        if principal.is_authenticated:
            conversation = ChatConversation(user_id=principal.user_id, session_id=None, expires_at=None)
        elif principal.session_id:
            conversation = ChatConversation(
                user_id=None,
                session_id=principal.session_id,
                expires_at=expiry_from(now, settings.GUEST_CHAT_TTL_HOURS),
            )
        else:
            raise ValidationFailed("Guest chats require an X-Session-ID header")

        conversation.title = title
        conversation.created_at = now
        conversation.updated_at = now
        enforce(principal, Operation.CREATE, EntityType.CHAT_CONVERSATION, conversation)

        with transaction(db):
            db.add(conversation)

        logger.info(
            "Conversation started",
            conversation_id=conversation.id,
            user_id=principal.user_id,
            guest=conversation.is_guest,
        )
        return conversation

    def get_conversation(self, db: Session, principal: Principal, conversation_id: str) -> ChatConversation:
        conversation = enforce(
            principal, Operation.READ, EntityType.CHAT_CONVERSATION, db.get(ChatConversation, conversation_id)
        )
        # Expired guest rows are gone as far as callers are concerned, swept or not
        if conversation.is_guest and is_expired(conversation.expires_at):
            raise NotFound()
        return conversation

    def list_conversations(self, db: Session, principal: Principal, limit: int = 20) -> List[ChatConversation]:
        rows = db.scalars(
            select(ChatConversation)
            .where(visible_conversations_clause(principal))
            .order_by(ChatConversation.updated_at.desc())
            .limit(limit)
        ).all()
        return [
            row for row in rows
            if authorize(principal, Operation.READ, EntityType.CHAT_CONVERSATION, row).allowed
            and not (row.is_guest and is_expired(row.expires_at))
        ]

    def add_message(
        self, db: Session, principal: Principal, conversation_id: str, data: MessageCreate
    ) -> ChatMessage:
        conversation = self.get_conversation(db, principal, conversation_id)
        enforce(principal, Operation.UPDATE, EntityType.CHAT_CONVERSATION, conversation)

        if data.recipe_context_id is not None:
            # Only recipes the caller may read can be discussed
            recipe = enforce(principal, Operation.READ, EntityType.RECIPE, db.get(Recipe, data.recipe_context_id))
            if recipe.is_deleted:
                raise NotFound()

        now = utcnow()
        message = ChatMessage(
            conversation_id=conversation.id,
            role=data.role,
            content=security_utils.sanitize_input(data.content),
            recipe_context_id=data.recipe_context_id,
            tokens_used=data.tokens_used,
            created_at=now,
        )

        with transaction(db):
            db.add(message)
            conversation.updated_at = now

        return message

    def list_messages(self, db: Session, principal: Principal, conversation_id: str) -> List[ChatMessage]:
        return list(self.get_conversation(db, principal, conversation_id).messages)

    def delete_conversation(self, db: Session, principal: Principal, conversation_id: str) -> None:
        conversation = enforce(
            principal, Operation.DELETE, EntityType.CHAT_CONVERSATION, db.get(ChatConversation, conversation_id)
        )

        with transaction(db):
            db.delete(conversation)

        logger.info("Conversation deleted", conversation_id=conversation_id, user_id=principal.user_id)


# Create singleton instance
chat_service = ChatService()
