"""
Telegram platform adapter.

Each sales module owns a bot. The bot id (numeric token prefix) is the
module's channel id and appears in the webhook URL.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from telegram import Bot, CallbackQuery, Message, Update

from salesbot.adapters.base import BasePlatformAdapter, find_header, media_kind
from salesbot.schemas.conversa import (
    Channel,
    InboundKind,
    InboundMessage,
    MessageMetadata,
    OutboundMessage,
    OutboundSendResult,
)


def _utc(ts: Optional[datetime]) -> datetime:
    if ts is None:
        return datetime.now(timezone.utc)
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def _message_attachments(msg: Message) -> list[dict[str, Any]]:
    attachments: list[dict[str, Any]] = []
    if msg.photo:
        # Telegram sends every resolution of one photo; keep them together
        attachments.append({"type": "photo", "file_ids": [p.file_id for p in msg.photo]})
    if msg.video:
        attachments.append({"type": "video", "file_id": msg.video.file_id})
    if msg.document:
        attachments.append({"type": "document", "file_id": msg.document.file_id})
    if msg.voice:
        attachments.append({"type": "voice", "file_id": msg.voice.file_id})
    return attachments


class TelegramAdapter(BasePlatformAdapter):
    """Per-bot adapter: secret-token check, update parsing, photo/video/text sends."""

    TELEGRAM_SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"

    def __init__(
        self,
        bot_token: str,
        webhook_secret: Optional[str] = None,
        bot_id: Optional[str] = None,
    ) -> None:
        self._bot_token = bot_token
        self._webhook_secret = webhook_secret
        self._bot_id = bot_id or bot_token.split(":", 1)[0]
        self._bot: Optional[Bot] = None

    @property
    def bot_id(self) -> str:
        return self._bot_id

    @property
    def bot(self) -> Bot:
        if self._bot is None:
            self._bot = Bot(token=self._bot_token)
        return self._bot

    def verify_webhook(
        self,
        secret: Optional[str],
        request_headers: Optional[dict[str, str]] = None,
        body: bytes = b"",
    ) -> bool:
        expected = secret or self._webhook_secret
        if not expected:
            return True
        return find_header(request_headers, self.TELEGRAM_SECRET_HEADER) == expected

    def parse_webhook(self, raw_payload: dict[str, Any]) -> list[InboundMessage]:
        """
        Parse one Telegram update.

        Raises:
            ValueError: the update carries neither a message nor a callback query.
        """
        update = Update.de_json(raw_payload, self.bot)
        if update is None:
            raise ValueError("Invalid Telegram update")
        if update.callback_query is not None:
            return [self._from_callback(update.callback_query)]
        if update.message is None:
            raise ValueError("Telegram update has no message")
        return [self._from_message(update.message)]

    def _from_callback(self, query: CallbackQuery) -> InboundMessage:
        # Inline-button presses are answered in the chat that showed the button
        user = query.from_user
        chat_id = query.message.chat.id if query.message else user.id
        return InboundMessage(
            channel=Channel.TELEGRAM,
            channel_id=self._bot_id,
            external_user_id=str(chat_id),
            message_id=str(query.id),
            kind=InboundKind.POSTBACK,
            text=query.data or "",
            customer_name=user.full_name,
            metadata=MessageMetadata(
                locale=user.language_code, timestamp=_utc(None)
            ),
        )

    def _from_message(self, msg: Message) -> InboundMessage:
        user = msg.from_user
        if msg.chat_id:
            chat_id = str(msg.chat_id)
        else:
            chat_id = str(user.id) if user else ""
        return InboundMessage(
            channel=Channel.TELEGRAM,
            channel_id=self._bot_id,
            external_user_id=chat_id,
            message_id=str(msg.message_id or ""),
            kind=InboundKind.MESSAGE,
            text=msg.text or msg.caption or "",
            customer_name=user.full_name if user else None,
            attachments=_message_attachments(msg),
            metadata=MessageMetadata(
                locale=user.language_code if user else None,
                timestamp=_utc(msg.date),
            ),
        )

    async def send(self, outbound: OutboundMessage) -> OutboundSendResult:
        """Send each media URL as a photo or video, then the text, to chat external_user_id."""
        if outbound.channel != Channel.TELEGRAM:
            return OutboundSendResult(success=False)

        chat_id = outbound.external_user_id
        for url in outbound.media_urls:
            if media_kind(url) == "video":
                await self.bot.send_video(chat_id=chat_id, video=url)
            else:
                await self.bot.send_photo(chat_id=chat_id, photo=url)

        sent_id: Optional[str] = None
        if outbound.text:
            reply_to = outbound.reply_to_message_id
            sent = await self.bot.send_message(
                chat_id=chat_id,
                text=outbound.text,
                reply_to_message_id=int(reply_to) if reply_to else None,
            )
            sent_id = str(sent.message_id) if sent and sent.message_id else None
        return OutboundSendResult(
            success=True,
            platform_message_id=sent_id,
            media_sent=len(outbound.media_urls),
        )
