"""SQLAlchemy-backed conversation store. Messages are stored in their own table and returned embedded."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import selectinload, sessionmaker

from salesbot.models.conversation import ConversationRecord
from salesbot.models.conversation_message import ConversationMessageRecord
from salesbot.schemas.conversation import Conversation
from salesbot.stores._session import as_utc, store_session, to_naive_utc


def _to_schema(record: ConversationRecord) -> Conversation:
    return Conversation.model_validate(
        {
            "id": record.id,
            "module_id": record.module_id,
            "customer_id": record.customer_id,
            "customer_name": record.customer_name,
            "status": record.status,
            "personality": record.personality,
            "started_at": as_utc(record.started_at),
            "last_message_at": as_utc(record.last_message_at),
            "updated_at": as_utc(record.updated_at),
            "messages": [
                {
                    "id": m.id,
                    "conversation_id": m.conversation_id,
                    "role": m.role,
                    "content": m.content,
                    "attachments": m.attachments or [],
                    "generation": m.generation,
                    "is_read": m.is_read,
                    "timestamp": as_utc(m.timestamp),
                }
                for m in record.messages
            ],
        }
    )


class SQLConversationStore:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    async def get(self, conversation_id: str) -> Optional[Conversation]:
        with store_session(self._session_factory, "load conversation") as db:
            record = (
                db.query(ConversationRecord)
                .options(selectinload(ConversationRecord.messages))
                .filter(ConversationRecord.id == conversation_id)
                .first()
            )
            return _to_schema(record) if record else None

    async def get_all_for_module(self, module_id: str) -> list[Conversation]:
        with store_session(self._session_factory, "list conversations") as db:
            records = (
                db.query(ConversationRecord)
                .options(selectinload(ConversationRecord.messages))
                .filter(ConversationRecord.module_id == module_id)
                .order_by(ConversationRecord.started_at, ConversationRecord.id)
                .all()
            )
            return [_to_schema(r) for r in records]

    async def save(self, conversation: Conversation) -> None:
        """Replace the conversation row and append messages not yet stored."""
        with store_session(self._session_factory, "save conversation") as db:
            record = db.get(ConversationRecord, conversation.id)
            if record is None:
                record = ConversationRecord(id=conversation.id)
                db.add(record)
            record.module_id = conversation.module_id
            record.customer_id = conversation.customer_id
            record.customer_name = conversation.customer_name
            record.status = conversation.status.value
            record.personality = (
                conversation.personality.model_dump(mode="json")
                if conversation.personality
                else None
            )
            record.started_at = to_naive_utc(conversation.started_at)
            record.last_message_at = to_naive_utc(conversation.last_message_at)
            record.updated_at = to_naive_utc(conversation.updated_at)

            stored_ids = {
                row.id
                for row in db.query(ConversationMessageRecord.id).filter(
                    ConversationMessageRecord.conversation_id == conversation.id
                )
            }
            for position, message in enumerate(conversation.messages):
                if message.id in stored_ids:
                    continue
                db.add(
                    ConversationMessageRecord(
                        id=message.id,
                        conversation_id=conversation.id,
                        position=position,
                        role=message.role,
                        content=message.content,
                        attachments=[
                            a.model_dump(mode="json") for a in message.attachments
                        ],
                        generation=(
                            message.generation.model_dump(mode="json")
                            if message.generation
                            else None
                        ),
                        is_read=message.is_read,
                        timestamp=to_naive_utc(message.timestamp),
                    )
                )
