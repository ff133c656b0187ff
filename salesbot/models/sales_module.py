"""SalesModule model: one row per merchant sales agent."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, JSON, String, Text
from sqlalchemy.dialects.postgresql import JSONB

from salesbot.db import Base
from salesbot.models.mixins import TimestampMixin

JSONType = JSON().with_variant(JSONB(), "postgresql")


class SalesModuleRecord(Base, TimestampMixin):
    """Channel binding is kept in indexed columns; catalog, media, backend config and training data live in JSON."""

    __tablename__ = "sales_modules"

    id = Column(String(64), primary_key=True)
    name = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    channel = Column(String(32), nullable=False, index=True)
    channel_id = Column(String(256), nullable=True, index=True)
    channel_name = Column(String(256), nullable=True)
    access_token = Column(Text, nullable=True)
    ai_provider = Column(JSONType, nullable=False, default=dict)
    products = Column(JSONType, nullable=False, default=list)
    media = Column(JSONType, nullable=False, default=list)
    training_data = Column(JSONType, nullable=True)
