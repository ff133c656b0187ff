"""Conversation, message, customer personality and derived memory schemas."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field

from salesbot.schemas.generation import ChatRole, GenerationMetadata

CommunicationStyle = Literal["direct", "polite", "casual", "formal", "friendly"]
Tone = Literal["positive", "neutral", "negative", "curious", "hesitant"]


class ConversationStatus(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class ConversationPhase(str, Enum):
    """Lifecycle phase of a conversation, derived from its status and assistant turns."""

    NEW = "new"
    INTRO_SENT = "intro_sent"
    STEADY = "steady"
    CLOSED = "closed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Attachment(BaseModel):
    kind: Literal["image", "video", "file"] = "image"
    url: str


class Message(BaseModel):
    """A single immutable turn. Messages are only ever appended."""

    id: str
    conversation_id: str
    role: ChatRole
    content: str
    attachments: list[Attachment] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=_utcnow)
    is_read: bool = False
    generation: Optional[GenerationMetadata] = None


class Priorities(BaseModel):
    # Unbounded: raw keyword hits x 2, never normalized.
    price: float = 5
    quality: float = 5
    speed: float = 5
    service: float = 5


class Traits(BaseModel):
    # Each clamped to [0, 10].
    decisive: float = 5
    detail_oriented: float = 5
    price_sensitive: float = 5
    brand_loyal: float = 5


class CustomerPersonality(BaseModel):
    communication_style: CommunicationStyle = "friendly"
    tone: Tone = "neutral"
    priorities: Priorities = Field(default_factory=Priorities)
    traits: Traits = Field(default_factory=Traits)
    confidence: float = Field(default=0.1, ge=0, le=1)


class Conversation(BaseModel):
    id: str
    module_id: str
    customer_id: str
    customer_name: Optional[str] = None
    messages: list[Message] = Field(default_factory=list)
    status: ConversationStatus = ConversationStatus.ACTIVE
    started_at: datetime = Field(default_factory=_utcnow)
    last_message_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    personality: Optional[CustomerPersonality] = None

    @property
    def phase(self) -> ConversationPhase:
        if self.status == ConversationStatus.CLOSED:
            return ConversationPhase.CLOSED
        replies = sum(1 for m in self.messages if m.role == "assistant")
        if replies == 0:
            return ConversationPhase.NEW
        if replies == 1:
            return ConversationPhase.INTRO_SENT
        return ConversationPhase.STEADY


class ConversationSummary(BaseModel):
    """List view of a conversation without its message bodies."""

    id: str
    module_id: str
    customer_id: str
    customer_name: Optional[str] = None
    status: ConversationStatus
    phase: ConversationPhase
    message_count: int
    started_at: datetime
    last_message_at: datetime

    @classmethod
    def from_conversation(cls, conversation: Conversation) -> "ConversationSummary":
        return cls(
            id=conversation.id,
            module_id=conversation.module_id,
            customer_id=conversation.customer_id,
            customer_name=conversation.customer_name,
            status=conversation.status,
            phase=conversation.phase,
            message_count=len(conversation.messages),
            started_at=conversation.started_at,
            last_message_at=conversation.last_message_at,
        )


class LongTermMemory(BaseModel):
    customer_preferences: list[str] = Field(default_factory=list)
    past_interactions: list[str] = Field(default_factory=list)
    important_notes: list[str] = Field(default_factory=list)


class ConversationMemory(BaseModel):
    """Tiered context view. Derived on demand, never persisted."""

    conversation_id: str
    immediate_context: list[Message] = Field(default_factory=list)
    summarized_context: str = ""
    long_term_memory: LongTermMemory = Field(default_factory=LongTermMemory)


class ChatResponse(BaseModel):
    text: str
    media: list[str] = Field(default_factory=list)
