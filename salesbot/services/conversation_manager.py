"""ConversationManager: get_or_create, add_message, close, and read helpers over the conversation store."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from salesbot.exceptions import NotFoundError
from salesbot.infra.logging_config import get_logger
from salesbot.schemas.conversation import (
    Attachment,
    Conversation,
    ConversationStatus,
    Message,
)
from salesbot.schemas.generation import ChatRole, GenerationMetadata
from salesbot.services import personality_engine
from salesbot.stores.base import ConversationStore

logger = get_logger("conversations")

DEFAULT_WINDOW = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class ConversationManager:
    def __init__(
        self,
        conversations: ConversationStore,
        window: timedelta = DEFAULT_WINDOW,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._conversations = conversations
        self._window = window
        self._clock = clock

    def _is_fresh(self, conversation: Conversation) -> bool:
        age = self._clock() - _as_utc(conversation.last_message_at)
        return age < self._window

    async def get_or_create(
        self,
        module_id: str,
        customer_id: str,
        customer_name: Optional[str] = None,
    ) -> Conversation:
        """Return the customer's current conversation, or start a new one when none is inside the window."""
        candidates = [
            c
            for c in await self._conversations.get_all_for_module(module_id)
            if c.customer_id == customer_id and c.status == ConversationStatus.ACTIVE
        ]
        if candidates:
            latest = max(candidates, key=lambda c: _as_utc(c.last_message_at))
            if self._is_fresh(latest):
                return latest
        return await self.create(module_id, customer_id, customer_name)

    async def create(
        self,
        module_id: str,
        customer_id: str,
        customer_name: Optional[str] = None,
    ) -> Conversation:
        now = self._clock()
        conversation = Conversation(
            id=str(uuid.uuid4()),
            module_id=module_id,
            customer_id=customer_id,
            customer_name=customer_name,
            messages=[],
            status=ConversationStatus.ACTIVE,
            started_at=now,
            last_message_at=now,
            updated_at=now,
        )
        await self._conversations.save(conversation)
        logger.info(
            "Created conversation %s (module=%s, customer=%s)",
            conversation.id,
            module_id,
            customer_id,
        )
        return conversation

    async def add_message(
        self,
        conversation_id: str,
        role: ChatRole,
        content: str,
        attachments: Optional[list[Attachment]] = None,
        generation: Optional[GenerationMetadata] = None,
    ) -> Message:
        """Append a message; user turns also refresh the cached personality."""
        conversation = await self._conversations.get(conversation_id)
        if conversation is None:
            raise NotFoundError("Conversation", conversation_id)

        now = self._clock()
        message = Message(
            id=str(uuid.uuid4()),
            conversation_id=conversation_id,
            role=role,
            content=content,
            attachments=list(attachments or []),
            timestamp=now,
            is_read=False,
            generation=generation,
        )
        conversation.messages.append(message)
        conversation.last_message_at = now
        conversation.updated_at = now

        if role == "user":
            # First user turn seeds the profile from history, then blends like any other
            current = conversation.personality or personality_engine.analyze(
                conversation.messages
            )
            conversation.personality = personality_engine.update(current, message)

        await self._conversations.save(conversation)
        logger.debug("Added %s message to conversation %s", role, conversation_id)
        return message

    async def close(self, conversation_id: str) -> None:
        conversation = await self._conversations.get(conversation_id)
        if conversation is None:
            return
        conversation.status = ConversationStatus.CLOSED
        conversation.updated_at = self._clock()
        await self._conversations.save(conversation)
        logger.info("Closed conversation %s", conversation_id)

    async def get(self, conversation_id: str) -> Optional[Conversation]:
        return await self._conversations.get(conversation_id)

    async def list_for_module(
        self, module_id: str, customer_id: Optional[str] = None
    ) -> list[Conversation]:
        conversations = await self._conversations.get_all_for_module(module_id)
        if customer_id is not None:
            conversations = [c for c in conversations if c.customer_id == customer_id]
        return sorted(
            conversations, key=lambda c: _as_utc(c.last_message_at), reverse=True
        )
