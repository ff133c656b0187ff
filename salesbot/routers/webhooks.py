"""
Webhook routes for inbound chat platform updates.

Messenger posts all pages to one endpoint; the page id in each entry selects
the sales module. Telegram posts to a per-bot URL.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from salesbot.commands.webhooks import MessengerWebhookCommand, TelegramWebhookCommand
from salesbot.core.app_state import AppState
from salesbot.routers.utils.dependencies import get_state

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.get("/messenger", response_class=PlainTextResponse)
def messenger_verify(
    mode: Optional[str] = Query(None, alias="hub.mode"),
    token: Optional[str] = Query(None, alias="hub.verify_token"),
    challenge: Optional[str] = Query(None, alias="hub.challenge"),
    state: AppState = Depends(get_state),
) -> str:
    """Answer the Messenger subscription handshake by echoing hub.challenge."""
    return MessengerWebhookCommand(state).verify(mode, token, challenge) or ""


@router.post("/messenger")
async def messenger_webhook(
    request: Request,
    state: AppState = Depends(get_state),
) -> dict[str, str]:
    """Receive Messenger page events and reply to each message or postback."""
    return await MessengerWebhookCommand(state).execute(request)


@router.post("/telegram/{channel_id}")
async def telegram_webhook(
    channel_id: str,
    request: Request,
    state: AppState = Depends(get_state),
) -> dict[str, str]:
    """
    Receive Telegram updates for the bot identified by channel_id.
    Validate X-Telegram-Bot-Api-Secret-Token if TELEGRAM_WEBHOOK_SECRET is set.
    """
    return await TelegramWebhookCommand(state).execute(request, channel_id)
