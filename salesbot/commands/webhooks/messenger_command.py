"""
Command to handle Messenger webhooks.

GET: answers the subscription handshake with hub.challenge.
POST: validates the X-Hub-Signature-256 signature, parses page events, and
runs each message or postback through the orchestrator for the page's module.
"""

from __future__ import annotations

import json
from typing import Optional

from fastapi import HTTPException, Request
from pydantic import ValidationError

from salesbot.adapters.messenger import MessengerAdapter
from salesbot.commands.base_channel import BaseChannelCommand
from salesbot.schemas.conversa import Channel, InboundMessage


class MessengerWebhookCommand(BaseChannelCommand):
    def _adapter(self, access_token: Optional[str] = None) -> MessengerAdapter:
        return MessengerAdapter(
            access_token=access_token,
            verify_token=self.settings.messenger_verify_token,
            app_secret=self.settings.messenger_app_secret,
            graph_api_url=self.settings.graph_api_url,
        )

    def verify(
        self, mode: Optional[str], token: Optional[str], challenge: Optional[str]
    ) -> str:
        """
        Answer the subscription handshake.

        Raises:
            HTTPException: 403 when the mode or verify token does not match.
        """
        result = self._adapter().verify_subscription(mode, token, challenge)
        if result is None:
            raise HTTPException(status_code=403, detail="Webhook verification failed")
        return result

    async def execute(self, request: Request) -> dict[str, str]:
        """
        Execute the Messenger webhook: validate signature, parse body, dispatch events.

        Returns:
            dict: {"status": "ok"} on success.

        Raises:
            HTTPException: 403 on invalid signature, 400 on an invalid payload.
        """
        body = await request.body()
        headers = dict(request.headers) if request.headers else {}
        parser = self._adapter()
        if not parser.verify_webhook(self.settings.messenger_app_secret, headers, body):
            raise HTTPException(status_code=403, detail="Invalid webhook signature")
        try:
            payload = json.loads(body)
        except ValueError as e:
            self.logger.warning("Messenger webhook invalid JSON: %s", e)
            raise HTTPException(status_code=400, detail="Invalid JSON body") from e
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Body must be a JSON object")
        try:
            events = parser.parse_webhook(payload)
        except (ValueError, ValidationError, KeyError, TypeError) as e:
            self.logger.warning("Messenger webhook parse error: %s", e)
            raise HTTPException(status_code=400, detail="Invalid Messenger event") from e

        for page_id, page_events in self._group_by_page(events).items():
            module = await self.resolve_module(Channel.MESSENGER, page_id)
            if module is None:
                self.logger.warning("No active module for Messenger page %s", page_id)
                continue
            adapter = self._adapter(module.access_token)
            try:
                for inbound in page_events:
                    await self.dispatch(module, adapter, inbound)
            finally:
                await adapter.aclose()
        return {"status": "ok"}

    @staticmethod
    def _group_by_page(
        events: list[InboundMessage],
    ) -> dict[str, list[InboundMessage]]:
        grouped: dict[str, list[InboundMessage]] = {}
        for inbound in events:
            grouped.setdefault(inbound.channel_id, []).append(inbound)
        return grouped
