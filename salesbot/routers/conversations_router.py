"""Conversations API: list, get, tiered memory, close."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from salesbot.core.app_state import AppState
from salesbot.exceptions import NotFoundError
from salesbot.routers.utils.dependencies import get_conversation_by_id, get_state
from salesbot.schemas.conversation import (
    Conversation,
    ConversationMemory,
    ConversationSummary,
)

conversations_router = APIRouter(prefix="/conversations", tags=["Conversation"])


@conversations_router.get("", response_model=list[ConversationSummary])
async def list_conversations(
    module_id: str = Query(...),
    customer_id: Optional[str] = Query(None),
    state: AppState = Depends(get_state),
) -> list[ConversationSummary]:
    """List a module's conversations, most recently active first."""
    conversations = await state.conversations.list_for_module(module_id, customer_id)
    return [ConversationSummary.from_conversation(c) for c in conversations]


@conversations_router.get("/{conversation_id}", response_model=Conversation)
async def get_conversation(
    conversation: Conversation = Depends(get_conversation_by_id),
) -> Conversation:
    return conversation


@conversations_router.get(
    "/{conversation_id}/memory", response_model=ConversationMemory
)
async def get_conversation_memory(
    conversation_id: str,
    immediate_size: Optional[int] = Query(None, ge=1),
    state: AppState = Depends(get_state),
) -> ConversationMemory:
    """Tiered memory view: recent messages, digest of older ones, and notes."""
    size = immediate_size or state.settings.immediate_context_size
    try:
        return await state.memory.get_memory(conversation_id, size)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Conversation not found") from e


@conversations_router.post("/{conversation_id}/close", response_model=Conversation)
async def close_conversation(
    conversation: Conversation = Depends(get_conversation_by_id),
    state: AppState = Depends(get_state),
) -> Conversation:
    await state.conversations.close(conversation.id)
    closed = await state.conversations.get(conversation.id)
    if closed is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return closed
