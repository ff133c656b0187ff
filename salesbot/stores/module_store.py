"""SQLAlchemy-backed module store."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import sessionmaker

from salesbot.models.sales_module import SalesModuleRecord
from salesbot.schemas.module import SalesModule
from salesbot.stores._session import as_utc, store_session, to_naive_utc


def _to_schema(record: SalesModuleRecord) -> SalesModule:
    return SalesModule.model_validate(
        {
            "id": record.id,
            "name": record.name,
            "description": record.description,
            "is_active": record.is_active,
            "channel": record.channel,
            "channel_id": record.channel_id,
            "channel_name": record.channel_name,
            "access_token": record.access_token,
            "ai_provider": record.ai_provider or {},
            "products": record.products or [],
            "media": record.media or [],
            "training_data": record.training_data,
            "created_at": as_utc(record.created_at),
            "updated_at": as_utc(record.updated_at),
        }
    )


def _apply(record: SalesModuleRecord, module: SalesModule) -> None:
    record.name = module.name
    record.description = module.description
    record.is_active = module.is_active
    record.channel = module.channel.value
    record.channel_id = module.channel_id
    record.channel_name = module.channel_name
    record.access_token = module.access_token
    record.ai_provider = module.ai_provider.model_dump(mode="json")
    record.products = [p.model_dump(mode="json") for p in module.products]
    record.media = [m.model_dump(mode="json") for m in module.media]
    record.training_data = (
        module.training_data.model_dump(mode="json")
        if module.training_data
        else None
    )
    record.created_at = to_naive_utc(module.created_at)
    record.updated_at = to_naive_utc(module.updated_at)


class SQLModuleStore:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    async def get(self, module_id: str) -> Optional[SalesModule]:
        with store_session(self._session_factory, "load module") as db:
            record = db.get(SalesModuleRecord, module_id)
            return _to_schema(record) if record else None

    async def get_all(self) -> list[SalesModule]:
        with store_session(self._session_factory, "list modules") as db:
            records = (
                db.query(SalesModuleRecord)
                .order_by(SalesModuleRecord.created_at, SalesModuleRecord.id)
                .all()
            )
            return [_to_schema(r) for r in records]

    async def save(self, module: SalesModule) -> None:
        with store_session(self._session_factory, "save module") as db:
            record = db.get(SalesModuleRecord, module.id)
            if record is None:
                record = SalesModuleRecord(id=module.id)
                db.add(record)
            _apply(record, module)

    async def delete(self, module_id: str) -> None:
        with store_session(self._session_factory, "delete module") as db:
            record = db.get(SalesModuleRecord, module_id)
            if record is not None:
                db.delete(record)
