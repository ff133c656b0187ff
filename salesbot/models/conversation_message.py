"""ConversationMessage model: one row per appended message, ordered by position."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from salesbot.db import Base
from salesbot.models.mixins import utcnow
from salesbot.models.sales_module import JSONType


class ConversationMessageRecord(Base):
    __tablename__ = "conversation_messages"

    id = Column(String(64), primary_key=True)
    conversation_id = Column(
        String(64),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False)
    role = Column(String(16), nullable=False)  # 'user' | 'assistant'
    content = Column(Text, nullable=False, default="")
    attachments = Column(JSONType, nullable=False, default=list)
    generation = Column(JSONType, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    timestamp = Column(DateTime, nullable=False, default=utcnow)

    conversation = relationship("ConversationRecord", back_populates="messages")
