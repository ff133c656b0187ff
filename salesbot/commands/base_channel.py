"""
Base command for channel webhooks.

Resolves the sales module for an inbound event, runs the orchestrator, and
sends the reply (media first, then text) through the channel adapter. When
the orchestrator itself raises, a fixed apology is sent directly.
"""

from __future__ import annotations

from typing import Optional

from salesbot.adapters.base import BasePlatformAdapter
from salesbot.constants.replies import APOLOGY_TEXT
from salesbot.core.app_state import AppState
from salesbot.infra.error_reporting import report_exception
from salesbot.infra.logging_config import get_logger
from salesbot.schemas.conversa import Channel, InboundMessage, OutboundMessage
from salesbot.schemas.module import SalesModule


class BaseChannelCommand:
    def __init__(self, state: AppState) -> None:
        self.state = state
        self.settings = state.settings
        self.logger = get_logger("webhooks")

    async def resolve_module(
        self, channel: Channel, channel_id: str
    ) -> Optional[SalesModule]:
        """First active module bound to this channel identity, or None."""
        for module in await self.state.modules.get_all():
            if (
                module.is_active
                and module.channel == channel
                and module.channel_id == channel_id
            ):
                return module
        return None

    async def dispatch(
        self,
        module: SalesModule,
        adapter: BasePlatformAdapter,
        inbound: InboundMessage,
    ) -> None:
        if not inbound.text.strip() and not inbound.attachments:
            self.logger.debug("Ignoring empty %s event", inbound.channel.value)
            return
        try:
            response = await self.state.orchestrator.handle_message(
                module.id,
                inbound.external_user_id,
                inbound.text,
                customer_name=inbound.customer_name,
            )
        except Exception as e:
            report_exception(
                e, module_id=module.id, customer_id=inbound.external_user_id
            )
            await self._send(
                adapter,
                OutboundMessage(
                    channel=inbound.channel,
                    external_user_id=inbound.external_user_id,
                    text=APOLOGY_TEXT,
                ),
            )
            return

        await self._send(
            adapter,
            OutboundMessage(
                channel=inbound.channel,
                external_user_id=inbound.external_user_id,
                text=response.text,
                media_urls=response.media,
            ),
        )

    async def _send(
        self, adapter: BasePlatformAdapter, outbound: OutboundMessage
    ) -> None:
        """Send and log. Delivery failures are reported but never fail the webhook."""
        try:
            result = await adapter.send(outbound)
        except Exception as e:
            report_exception(
                e,
                channel=outbound.channel.value,
                recipient=outbound.external_user_id,
            )
            return
        if result.success:
            self.logger.info(
                "Sent %s reply to %s (%d media)",
                outbound.channel.value,
                outbound.external_user_id,
                result.media_sent,
            )
        else:
            self.logger.warning(
                "Failed to send %s reply to %s",
                outbound.channel.value,
                outbound.external_user_id,
            )
