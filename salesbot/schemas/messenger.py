"""
Messenger webhook payload schemas.

Matches the structure the Graph API POSTs to the page webhook
(object="page", entry[].messaging[]).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class MessengerParticipant(BaseModel):
    id: str


class MessengerAttachmentPayload(BaseModel):
    url: Optional[str] = None


class MessengerAttachment(BaseModel):
    type: str
    payload: MessengerAttachmentPayload = Field(
        default_factory=MessengerAttachmentPayload
    )


class MessengerMessage(BaseModel):
    """messaging[].message"""

    mid: str = ""
    text: Optional[str] = None
    is_echo: bool = False
    attachments: list[MessengerAttachment] = Field(default_factory=list)


class MessengerPostback(BaseModel):
    """messaging[].postback (button click)."""

    title: Optional[str] = None
    payload: str = ""


class MessengerDelivery(BaseModel):
    mids: list[str] = Field(default_factory=list)
    watermark: int = 0


class MessengerRead(BaseModel):
    watermark: int = 0


class MessengerMessagingEvent(BaseModel):
    sender: MessengerParticipant
    recipient: MessengerParticipant
    timestamp: Optional[int] = None
    message: Optional[MessengerMessage] = None
    postback: Optional[MessengerPostback] = None
    delivery: Optional[MessengerDelivery] = None
    read: Optional[MessengerRead] = None


class MessengerEntry(BaseModel):
    id: str  # page id
    time: Optional[int] = None
    messaging: list[MessengerMessagingEvent] = Field(default_factory=list)


class MessengerWebhookEvent(BaseModel):
    """Messenger webhook payload (root object)."""

    object: str
    entry: list[MessengerEntry] = Field(default_factory=list)
