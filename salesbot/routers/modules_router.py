"""Sales modules API: list, get, upsert, delete, training ingestion, prompt preview."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from salesbot.core.app_state import AppState
from salesbot.routers.utils.dependencies import get_module_by_id, get_state
from salesbot.schemas.module import (
    PromptPreview,
    SalesModule,
    SalesModuleWrite,
    TrainingTextIn,
)
from salesbot.services.prompt_compiler import compile_prompt
from salesbot.services.training_parser import parse_training_text

modules_router = APIRouter(prefix="/modules", tags=["Modules"])


@modules_router.get("", response_model=list[SalesModule])
async def list_modules(state: AppState = Depends(get_state)) -> list[SalesModule]:
    return await state.modules.get_all()


@modules_router.get("/{module_id}", response_model=SalesModule)
async def get_module(module: SalesModule = Depends(get_module_by_id)) -> SalesModule:
    return module


@modules_router.put("/{module_id}", response_model=SalesModule)
async def put_module(
    module_id: str,
    data: SalesModuleWrite,
    state: AppState = Depends(get_state),
) -> SalesModule:
    """Create or fully replace a sales module. created_at is kept on replace."""
    existing = await state.modules.get(module_id)
    now = datetime.now(timezone.utc)
    module = SalesModule(
        id=module_id,
        created_at=existing.created_at if existing else now,
        updated_at=now,
        **data.model_dump(),
    )
    await state.modules.save(module)
    return module


@modules_router.delete("/{module_id}", status_code=204)
async def delete_module(
    module: SalesModule = Depends(get_module_by_id),
    state: AppState = Depends(get_state),
) -> None:
    await state.modules.delete(module.id)


@modules_router.post("/{module_id}/training", response_model=SalesModule)
async def ingest_training_text(
    data: TrainingTextIn,
    module: SalesModule = Depends(get_module_by_id),
    state: AppState = Depends(get_state),
) -> SalesModule:
    """Parse labelled training text and store it as the module's training data."""
    module.training_data = parse_training_text(data.raw_text)
    module.updated_at = datetime.now(timezone.utc)
    await state.modules.save(module)
    return module


@modules_router.get("/{module_id}/prompt", response_model=PromptPreview)
async def preview_prompt(
    module: SalesModule = Depends(get_module_by_id),
) -> PromptPreview:
    """System prompt the module would use for a customer with default personality."""
    return PromptPreview(module_id=module.id, prompt=compile_prompt(module))
