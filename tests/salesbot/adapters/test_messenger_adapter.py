"""Tests for MessengerAdapter."""

import hashlib
import hmac
import json

import httpx
import pytest

from salesbot.adapters.messenger import MessengerAdapter
from salesbot.exceptions import ConfigurationError
from salesbot.schemas.conversa import Channel, InboundKind, OutboundMessage

PAGE_ID = "104857600000001"
GRAPH = "https://graph.facebook.com/v18.0"


def page_event(*messaging):
    return {"object": "page", "entry": [{"id": PAGE_ID, "time": 1, "messaging": list(messaging)}]}


def text_message(text="áo này giá bao nhiêu?", sender="psid-1", mid="m_1"):
    return {
        "sender": {"id": sender},
        "recipient": {"id": PAGE_ID},
        "timestamp": 1709280000000,
        "message": {"mid": mid, "text": text},
    }


def sign(secret, body):
    return "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


class GraphRecorder:
    """httpx transport handler that records Send API calls."""

    def __init__(self, fail_on=None):
        self.requests = []
        self.fail_on = fail_on or set()

    def __call__(self, request):
        payload = json.loads(request.content)
        self.requests.append((request, payload))
        url = payload["message"].get("attachment", {}).get("payload", {}).get("url")
        if url in self.fail_on:
            return httpx.Response(400, json={"error": {"message": "bad url"}})
        return httpx.Response(200, json={"message_id": f"mid.{len(self.requests)}"})


def adapter_with(recorder, access_token="page-token"):
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return MessengerAdapter(access_token=access_token, graph_api_url=GRAPH, client=client)


def test_verify_subscription_echoes_challenge():
    adapter = MessengerAdapter(verify_token="verify-me")
    assert adapter.verify_subscription("subscribe", "verify-me", "12345") == "12345"
    assert adapter.verify_subscription("subscribe", "wrong", "12345") is None
    assert adapter.verify_subscription("unsubscribe", "verify-me", "12345") is None
    assert MessengerAdapter().verify_subscription("subscribe", "x", "1") is None


def test_verify_webhook_signature():
    body = json.dumps(page_event(text_message())).encode()
    adapter = MessengerAdapter(app_secret="app-secret")
    assert adapter.verify_webhook(None, {"x-hub-signature-256": sign("app-secret", body)}, body)
    assert not adapter.verify_webhook(None, {"X-Hub-Signature-256": sign("other", body)}, body)
    assert not adapter.verify_webhook(None, {}, body)
    assert MessengerAdapter().verify_webhook(None, {}, body) is True


def test_parse_messages_and_postbacks():
    postback = {
        "sender": {"id": "psid-2"},
        "recipient": {"id": PAGE_ID},
        "timestamp": 1709280000000,
        "postback": {"title": "Mua ngay", "payload": "BUY_NOW"},
    }
    inbound = MessengerAdapter().parse_webhook(page_event(text_message(), postback))

    assert [(m.kind, m.text, m.external_user_id) for m in inbound] == [
        (InboundKind.MESSAGE, "áo này giá bao nhiêu?", "psid-1"),
        (InboundKind.POSTBACK, "BUY_NOW", "psid-2"),
    ]
    assert all(m.channel == Channel.MESSENGER for m in inbound)
    assert all(m.channel_id == PAGE_ID for m in inbound)
    assert inbound[0].message_id == "m_1"
    assert inbound[0].metadata.timestamp.year == 2024


def test_parse_skips_echoes_and_receipts():
    echo = text_message()
    echo["message"]["is_echo"] = True
    delivery = {
        "sender": {"id": "psid-1"},
        "recipient": {"id": PAGE_ID},
        "delivery": {"mids": ["m_1"], "watermark": 1709280000000},
    }
    read = {
        "sender": {"id": "psid-1"},
        "recipient": {"id": PAGE_ID},
        "read": {"watermark": 1709280000000},
    }
    assert MessengerAdapter().parse_webhook(page_event(echo, delivery, read)) == []


def test_parse_rejects_non_page_objects():
    with pytest.raises(ValueError, match="Unsupported"):
        MessengerAdapter().parse_webhook({"object": "instagram", "entry": []})


@pytest.mark.asyncio
async def test_send_media_then_text():
    recorder = GraphRecorder()
    adapter = adapter_with(recorder)
    result = await adapter.send(
        OutboundMessage(
            channel=Channel.MESSENGER,
            external_user_id="psid-1",
            text="Dạ mẫu đây ạ",
            media_urls=["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.mp4"],
        )
    )
    await adapter.aclose()

    assert result.success is True
    assert result.media_sent == 2
    assert result.platform_message_id == "mid.3"
    payloads = [payload for _, payload in recorder.requests]
    assert payloads[0]["message"]["attachment"]["type"] == "image"
    assert payloads[1]["message"]["attachment"]["type"] == "video"
    assert payloads[2] == {"recipient": {"id": "psid-1"}, "message": {"text": "Dạ mẫu đây ạ"}}
    request = recorder.requests[0][0]
    assert str(request.url).startswith(f"{GRAPH}/me/messages")
    assert request.url.params["access_token"] == "page-token"


@pytest.mark.asyncio
async def test_failed_media_does_not_stop_text():
    recorder = GraphRecorder(fail_on={"https://cdn.example.com/broken.jpg"})
    adapter = adapter_with(recorder)
    result = await adapter.send(
        OutboundMessage(
            channel=Channel.MESSENGER,
            external_user_id="psid-1",
            text="Dạ",
            media_urls=["https://cdn.example.com/broken.jpg"],
        )
    )
    assert result.success is True
    assert result.media_sent == 0
    assert len(recorder.requests) == 2


@pytest.mark.asyncio
async def test_send_without_page_token_raises():
    adapter = adapter_with(GraphRecorder(), access_token=None)
    with pytest.raises(ConfigurationError):
        await adapter.send(
            OutboundMessage(channel=Channel.MESSENGER, external_user_id="psid-1", text="hi")
        )
