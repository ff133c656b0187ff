"""
Platform adapter interface.

Adapters encapsulate platform-specific logic: they verify webhook requests,
decode events into normalized inbound messages, and transmit outbound replies.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from salesbot.schemas.conversa import InboundMessage, OutboundMessage, OutboundSendResult


def find_header(headers: Optional[dict[str, str]], name: str) -> Optional[str]:
    """Case-insensitive header lookup (Starlette lowercases header names)."""
    lowered = name.lower()
    for key, value in (headers or {}).items():
        if key.lower() == lowered:
            return value
    return None


def media_kind(url: str) -> str:
    """'video' for common video file extensions, otherwise 'image'."""
    path = url.split("?", 1)[0].lower()
    return "video" if path.endswith((".mp4", ".mov", ".avi", ".webm")) else "image"


class BasePlatformAdapter(ABC):
    """Contract for platform adapters. New platforms implement this interface."""

    @abstractmethod
    def parse_webhook(self, raw_payload: dict[str, Any]) -> list[InboundMessage]:
        """Parse raw webhook payload into inbound messages (one per message or postback). Raise if invalid."""
        ...

    @abstractmethod
    async def send(self, outbound: OutboundMessage) -> OutboundSendResult:
        """Send media (one send each) and then the text. Return success and optional message_id."""
        ...

    def verify_webhook(
        self,
        secret: Optional[str],
        request_headers: Optional[dict[str, str]] = None,
        body: bytes = b"",
    ) -> bool:
        """
        Verify webhook request (e.g. secret token, payload signature). Override if platform supports it.
        Return True if valid or verification not required; False to reject.
        """
        return True
