"""
Normalized channel message contracts.

Channel adapters convert inbound webhook events into InboundMessage and
transmit OutboundMessage back out. Independent of the conversation pipeline.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class Channel(str, Enum):
    """Supported chat channels."""

    MESSENGER = "messenger"
    TELEGRAM = "telegram"


class InboundKind(str, Enum):
    MESSAGE = "message"
    POSTBACK = "postback"


class MessageMetadata(BaseModel):
    """Metadata for normalized messages (locale, timestamp)."""

    locale: Optional[str] = None
    timestamp: Optional[datetime] = None  # ISO8601


class InboundMessage(BaseModel):
    """Normalized inbound message (adapter → orchestrator).

    channel_id is the page id (Messenger) or bot id (Telegram) the customer
    wrote to; it selects the sales module. For postbacks, text holds the payload.
    """

    channel: Channel
    channel_id: str
    external_user_id: str
    message_id: str = ""
    kind: InboundKind = InboundKind.MESSAGE
    text: str = ""
    customer_name: Optional[str] = None
    attachments: list[dict[str, Any]] = Field(default_factory=list)
    metadata: MessageMetadata = Field(default_factory=MessageMetadata)


class OutboundMessage(BaseModel):
    """Normalized outbound message (orchestrator → adapter). Media go out first, then text."""

    channel: Channel
    external_user_id: str  # Messenger: PSID, Telegram: chat_id
    text: str
    media_urls: list[str] = Field(default_factory=list)
    reply_to_message_id: Optional[str] = None


class OutboundSendResult(BaseModel):
    """Result of sending an outbound message (success + optional message_id)."""

    success: bool
    platform_message_id: Optional[str] = None
    media_sent: int = 0
