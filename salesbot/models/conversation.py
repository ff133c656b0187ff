"""Conversation model: one row per (module, customer) conversation thread."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship

from salesbot.db import Base
from salesbot.models.mixins import utcnow
from salesbot.models.sales_module import JSONType


class ConversationRecord(Base):
    __tablename__ = "conversations"
    __table_args__ = (
        Index("ix_conversations_module_customer", "module_id", "customer_id"),
    )

    id = Column(String(64), primary_key=True)
    module_id = Column(
        String(64),
        ForeignKey("sales_modules.id", ondelete="CASCADE"),
        nullable=False,
    )
    customer_id = Column(String(256), nullable=False)
    customer_name = Column(String(256), nullable=True)
    status = Column(String(16), nullable=False, default="active")  # 'active' | 'closed'
    personality = Column(JSONType, nullable=True)
    started_at = Column(DateTime, nullable=False, default=utcnow)
    last_message_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    messages = relationship(
        "ConversationMessageRecord",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="ConversationMessageRecord.position",
    )
