from fastapi import APIRouter, Depends

from salesbot.core.app_state import AppState
from salesbot.routers.utils.dependencies import get_state

router = APIRouter(
    prefix="/system",
    tags=["system"],
    responses={404: {"description": "Not found"}},
)


@router.get("/health")
def health(state: AppState = Depends(get_state)) -> dict:
    """Liveness check plus the registered generation backends."""
    s = state.settings
    return {
        "status": "ok",
        "app": s.app_name,
        "environment": s.environment,
        "backends": [
            {"name": b.name, "display_name": b.display_name, "is_free": b.is_free}
            for b in state.gateway.registry.list_backends()
        ],
    }
