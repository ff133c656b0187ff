from fastapi import Depends, HTTPException, Request

from salesbot.core.app_state import AppState
from salesbot.schemas.conversation import Conversation
from salesbot.schemas.module import SalesModule


def get_state(request: Request) -> AppState:
    """FastAPI dependency returning the application state attached by create_app."""
    return request.app.state.salesbot


async def get_module_by_id(
    module_id: str,
    state: AppState = Depends(get_state),
) -> SalesModule:
    """FastAPI dependency to get a sales module by ID."""
    module = await state.modules.get(module_id)
    if module is None:
        raise HTTPException(status_code=404, detail="Sales module not found")
    return module


async def get_conversation_by_id(
    conversation_id: str,
    state: AppState = Depends(get_state),
) -> Conversation:
    """FastAPI dependency to get a conversation by ID."""
    conversation = await state.conversations.get(conversation_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation
