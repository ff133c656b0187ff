"""
Tiered conversation memory.

immediate: the last N messages verbatim.
summarized: a digest of everything older, grouped by role.
long-term: preference / past-interaction / note strings extracted from the
older user messages, plus personality-driven notes.

Memory is always recomputed from the stored conversation and never persisted.
"""

from __future__ import annotations

from typing import Sequence

from salesbot.exceptions import NotFoundError
from salesbot.schemas.conversation import (
    Conversation,
    ConversationMemory,
    LongTermMemory,
    Message,
)
from salesbot.schemas.generation import ChatTurn
from salesbot.stores.base import ConversationStore

SUMMARY_PREFIX_CHARS = 50
PERSONALITY_NOTE_THRESHOLD = 7

USER_SUMMARY_LABEL = "Khách hàng đã hỏi về: "
ASSISTANT_SUMMARY_LABEL = "Đã trả lời về: "
DIGEST_LABEL = "[Tóm tắt cuộc trò chuyện trước]: "
NOTES_LABEL = "[Ghi chú về khách hàng]: "

PREFERENCE_KEYWORDS = ("thích", "muốn")
PAST_INTERACTION_KEYWORDS = ("đã", "trước")
PRICE_DELIVERY_KEYWORDS = ("giá", "giao", "ship")

PRICE_DELIVERY_NOTE = "Khách hàng quan tâm đến giá và giao hàng"
PRICE_SENSITIVE_NOTE = "Khách hàng nhạy cảm về giá"
DETAIL_ORIENTED_NOTE = "Khách hàng chú ý chi tiết"


def _split(messages: Sequence[Message], immediate_size: int):
    if immediate_size <= 0:
        return [], list(messages)
    return list(messages[:-immediate_size]), list(messages[-immediate_size:])


def summarize(messages: Sequence[Message]) -> str:
    if not messages:
        return ""
    lines = []
    user_parts = [
        m.content[:SUMMARY_PREFIX_CHARS] for m in messages if m.role == "user"
    ]
    assistant_parts = [
        m.content[:SUMMARY_PREFIX_CHARS] for m in messages if m.role == "assistant"
    ]
    if user_parts:
        lines.append(USER_SUMMARY_LABEL + "; ".join(user_parts))
    if assistant_parts:
        lines.append(ASSISTANT_SUMMARY_LABEL + "; ".join(assistant_parts))
    return "\n".join(lines)


def _first_containing(messages: Sequence[Message], keywords: Sequence[str]):
    for message in messages:
        lowered = message.content.lower()
        if any(k in lowered for k in keywords):
            return message
    return None


def extract_long_term(
    conversation: Conversation, older: Sequence[Message]
) -> LongTermMemory:
    memory = LongTermMemory()
    user_messages = [m for m in older if m.role == "user"]

    preference = _first_containing(user_messages, PREFERENCE_KEYWORDS)
    if preference is not None:
        memory.customer_preferences.append(preference.content)

    past = _first_containing(user_messages, PAST_INTERACTION_KEYWORDS)
    if past is not None:
        memory.past_interactions.append(past.content)

    if _first_containing(user_messages, PRICE_DELIVERY_KEYWORDS) is not None:
        memory.important_notes.append(PRICE_DELIVERY_NOTE)

    personality = conversation.personality
    if personality is not None:
        if personality.traits.price_sensitive > PERSONALITY_NOTE_THRESHOLD:
            memory.important_notes.append(PRICE_SENSITIVE_NOTE)
        if personality.traits.detail_oriented > PERSONALITY_NOTE_THRESHOLD:
            memory.important_notes.append(DETAIL_ORIENTED_NOTE)
    return memory


def compile_memory(
    conversation: Conversation, immediate_size: int = 10
) -> ConversationMemory:
    """Derive the three memory tiers from a conversation snapshot."""
    older, immediate = _split(conversation.messages, immediate_size)
    return ConversationMemory(
        conversation_id=conversation.id,
        immediate_context=[m.model_copy(deep=True) for m in immediate],
        summarized_context=summarize(older),
        long_term_memory=extract_long_term(conversation, older),
    )


def to_history(memory: ConversationMemory) -> list[ChatTurn]:
    """Flatten memory into role/content turns for a generation backend."""
    turns: list[ChatTurn] = []
    preamble = []
    if memory.summarized_context:
        preamble.append(DIGEST_LABEL + memory.summarized_context)
    long_term = memory.long_term_memory
    notes = (
        long_term.customer_preferences
        + long_term.past_interactions
        + long_term.important_notes
    )
    if notes:
        preamble.append(NOTES_LABEL + "; ".join(notes))
    if preamble:
        turns.append(ChatTurn(role="assistant", content="\n".join(preamble)))
    for message in memory.immediate_context:
        if message.content.strip():
            turns.append(ChatTurn(role=message.role, content=message.content))
    return turns


class MemoryCompiler:
    def __init__(self, conversations: ConversationStore) -> None:
        self._conversations = conversations

    async def get_memory(
        self, conversation_id: str, immediate_size: int = 10
    ) -> ConversationMemory:
        conversation = await self._conversations.get(conversation_id)
        if conversation is None:
            raise NotFoundError("Conversation", conversation_id)
        return compile_memory(conversation, immediate_size)
