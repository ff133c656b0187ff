"""
Facebook Messenger platform adapter.

Uses the Graph API Send API (POST /me/messages) through httpx. Webhook setup
is verified with the hub.mode / hub.verify_token / hub.challenge handshake;
event POSTs are verified with the X-Hub-Signature-256 HMAC when an app
secret is configured.
"""

from __future__ import annotations

import hashlib
import hmac
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from salesbot.adapters.base import BasePlatformAdapter, find_header, media_kind
from salesbot.exceptions import ConfigurationError
from salesbot.infra.logging_config import get_logger
from salesbot.schemas.conversa import (
    Channel,
    InboundKind,
    InboundMessage,
    MessageMetadata,
    OutboundMessage,
    OutboundSendResult,
)
from salesbot.schemas.messenger import MessengerWebhookEvent

logger = get_logger("messenger")

DEFAULT_GRAPH_API_URL = "https://graph.facebook.com/v18.0"
SUBSCRIBE_MODE = "subscribe"
PAGE_OBJECT = "page"


class MessengerAdapter(BasePlatformAdapter):
    """Messenger adapter: verify and parse page webhooks, send replies via the Send API."""

    SIGNATURE_HEADER = "X-Hub-Signature-256"

    def __init__(
        self,
        access_token: Optional[str] = None,
        verify_token: Optional[str] = None,
        app_secret: Optional[str] = None,
        graph_api_url: str = DEFAULT_GRAPH_API_URL,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._access_token = access_token
        self._verify_token = verify_token
        self._app_secret = app_secret
        self._graph_api_url = graph_api_url.rstrip("/")
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(30.0))
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def verify_subscription(
        self, mode: Optional[str], token: Optional[str], challenge: Optional[str]
    ) -> Optional[str]:
        """Return the challenge to echo back when the handshake matches, else None."""
        if (
            self._verify_token
            and mode == SUBSCRIBE_MODE
            and token is not None
            and hmac.compare_digest(token, self._verify_token)
        ):
            logger.info("Messenger webhook subscription verified")
            return challenge
        logger.warning("Messenger webhook verification failed (mode=%s)", mode)
        return None

    def verify_webhook(
        self,
        secret: Optional[str],
        request_headers: Optional[dict[str, str]] = None,
        body: bytes = b"",
    ) -> bool:
        """Validate X-Hub-Signature-256 (sha256 HMAC of the raw body) if an app secret is configured."""
        expected_secret = secret or self._app_secret
        if not expected_secret:
            return True
        signature = find_header(request_headers, self.SIGNATURE_HEADER)
        if not signature or not signature.startswith("sha256="):
            return False
        digest = hmac.new(expected_secret.encode(), body, hashlib.sha256).hexdigest()
        return hmac.compare_digest(signature[len("sha256=") :], digest)

    def parse_webhook(self, raw_payload: dict[str, Any]) -> list[InboundMessage]:
        """Parse a page webhook into one inbound message per message or postback event."""
        event = MessengerWebhookEvent.model_validate(raw_payload)
        if event.object != PAGE_OBJECT:
            raise ValueError(f"Unsupported Messenger webhook object: {event.object}")

        inbound: list[InboundMessage] = []
        for entry in event.entry:
            for messaging in entry.messaging:
                ts = (
                    datetime.fromtimestamp(messaging.timestamp / 1000, tz=timezone.utc)
                    if messaging.timestamp
                    else datetime.now(timezone.utc)
                )
                metadata = MessageMetadata(timestamp=ts)
                if messaging.message is not None and not messaging.message.is_echo:
                    inbound.append(
                        InboundMessage(
                            channel=Channel.MESSENGER,
                            channel_id=entry.id,
                            external_user_id=messaging.sender.id,
                            message_id=messaging.message.mid,
                            kind=InboundKind.MESSAGE,
                            text=messaging.message.text or "",
                            attachments=[
                                {"type": a.type, "url": a.payload.url}
                                for a in messaging.message.attachments
                            ],
                            metadata=metadata,
                        )
                    )
                if messaging.postback is not None:
                    inbound.append(
                        InboundMessage(
                            channel=Channel.MESSENGER,
                            channel_id=entry.id,
                            external_user_id=messaging.sender.id,
                            kind=InboundKind.POSTBACK,
                            text=messaging.postback.payload,
                            metadata=metadata,
                        )
                    )
                if messaging.delivery is not None:
                    logger.debug(
                        "Messenger delivery receipt: %s",
                        ", ".join(messaging.delivery.mids),
                    )
                if messaging.read is not None:
                    logger.debug(
                        "Messenger read receipt at watermark %s",
                        messaging.read.watermark,
                    )
        return inbound

    async def _post_message(
        self, recipient_id: str, message: dict[str, Any]
    ) -> Optional[str]:
        if not self._access_token:
            raise ConfigurationError("Messenger page access token is not configured")
        response = await self._get_client().post(
            f"{self._graph_api_url}/me/messages",
            params={"access_token": self._access_token},
            json={"recipient": {"id": recipient_id}, "message": message},
        )
        response.raise_for_status()
        return response.json().get("message_id")

    async def send_media(self, recipient_id: str, url: str) -> Optional[str]:
        return await self._post_message(
            recipient_id,
            {
                "attachment": {
                    "type": media_kind(url),
                    "payload": {"url": url, "is_reusable": True},
                }
            },
        )

    async def send_text(self, recipient_id: str, text: str) -> Optional[str]:
        return await self._post_message(recipient_id, {"text": text})

    async def send(self, outbound: OutboundMessage) -> OutboundSendResult:
        """Send each media URL as its own attachment message, then the text."""
        if outbound.channel != Channel.MESSENGER:
            return OutboundSendResult(success=False, platform_message_id=None)

        media_sent = 0
        for url in outbound.media_urls:
            try:
                await self.send_media(outbound.external_user_id, url)
                media_sent += 1
            except httpx.HTTPError as e:
                logger.warning("Messenger media send failed for %s: %s", url, e)

        if not outbound.text:
            return OutboundSendResult(success=media_sent > 0, media_sent=media_sent)
        try:
            message_id = await self.send_text(outbound.external_user_id, outbound.text)
        except httpx.HTTPError as e:
            logger.error("Messenger text send failed: %s", e)
            return OutboundSendResult(success=False, media_sent=media_sent)
        return OutboundSendResult(
            success=True, platform_message_id=message_id, media_sent=media_sent
        )
