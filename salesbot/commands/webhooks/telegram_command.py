"""
Command to handle Telegram webhook updates.

The webhook URL carries the bot id, which selects the sales module and its
bot token. Validates the secret header, parses the update, and runs it
through the orchestrator.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request

from salesbot.adapters.telegram import TelegramAdapter
from salesbot.commands.base_channel import BaseChannelCommand
from salesbot.schemas.conversa import Channel


class TelegramWebhookCommand(BaseChannelCommand):
    async def execute(self, request: Request, channel_id: str) -> dict[str, str]:
        """
        Execute the Telegram webhook: resolve module, validate secret, parse body, dispatch.

        Returns:
            dict: {"status": "ok"} on success.

        Raises:
            HTTPException: 404 if no active module owns the bot, 403 on invalid
                secret, 400 on invalid Telegram update.
        """
        module = await self.resolve_module(Channel.TELEGRAM, channel_id)
        if module is None or not module.access_token:
            raise HTTPException(
                status_code=404, detail="No active sales module for this bot"
            )
        adapter = TelegramAdapter(
            bot_token=module.access_token,
            webhook_secret=self.settings.telegram_webhook_secret,
            bot_id=channel_id,
        )
        headers = dict(request.headers) if request.headers else {}
        if not adapter.verify_webhook(self.settings.telegram_webhook_secret, headers):
            raise HTTPException(status_code=403, detail="Invalid webhook secret")
        try:
            body: Any = await request.json()
        except ValueError as e:
            self.logger.warning("Telegram webhook invalid JSON: %s", e)
            raise HTTPException(status_code=400, detail="Invalid JSON body") from e
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail="Body must be a JSON object")
        try:
            events = adapter.parse_webhook(body)
        except (ValueError, KeyError, TypeError) as e:
            self.logger.warning("Telegram webhook parse error: %s", e)
            raise HTTPException(status_code=400, detail="Invalid Telegram update") from e

        for inbound in events:
            await self.dispatch(module, adapter, inbound)
        return {"status": "ok"}
