"""
Recipe Share Chat Endpoints
Conversations for signed-in users and guests

Guests identify their session with the X-Session-ID header.
"""

from typing import List, Optional

from fastapi import APIRouter, Body, status

from core.dependencies import DbSession, RequestPrincipal
from schemas.chat_schemas import (
    ConversationCreate, ConversationDetailResponse, ConversationResponse, MessageCreate, MessageResponse,
)
from services.chat_service import chat_service

router = APIRouter()


@router.get("/conversations", response_model=List[ConversationResponse])
def list_conversations(principal: RequestPrincipal, db: DbSession):
    return chat_service.list_conversations(db, principal)


@router.post("/conversations", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
def start_conversation(
    principal: RequestPrincipal,
    db: DbSession,
    data: Optional[ConversationCreate] = Body(None),
):
    return chat_service.start_conversation(db, principal, data)


@router.get("/conversations/{conversation_id}", response_model=ConversationDetailResponse)
def get_conversation(conversation_id: str, principal: RequestPrincipal, db: DbSession):
    return chat_service.get_conversation(db, principal, conversation_id)


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_message(conversation_id: str, data: MessageCreate, principal: RequestPrincipal, db: DbSession):
    return chat_service.add_message(db, principal, conversation_id, data)


@router.delete("/conversations/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_conversation(conversation_id: str, principal: RequestPrincipal, db: DbSession):
    chat_service.delete_conversation(db, principal, conversation_id)
