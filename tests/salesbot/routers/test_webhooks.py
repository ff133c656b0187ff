"""Tests for webhook routes."""

import hashlib
import hmac
import json
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from salesbot.config import Settings
from salesbot.constants.replies import APOLOGY_TEXT
from salesbot.core.app_state import AppState
from salesbot.main import create_app
from salesbot.schemas.conversa import Channel, OutboundSendResult
from tests.fixtures.app_fixtures import put_module

MESSENGER_SEND = "salesbot.adapters.messenger.MessengerAdapter.send"
TELEGRAM_SEND = "salesbot.adapters.telegram.TelegramAdapter.send"


def page_event(page_id, text="hi", sender="psid-1"):
    return {
        "object": "page",
        "entry": [
            {
                "id": page_id,
                "time": 1709280000000,
                "messaging": [
                    {
                        "sender": {"id": sender},
                        "recipient": {"id": page_id},
                        "timestamp": 1709280000000,
                        "message": {"mid": "m_1", "text": text},
                    }
                ],
            }
        ],
    }


def telegram_update(text="hi"):
    return {
        "update_id": 1,
        "message": {
            "message_id": 10,
            "from": {"id": 789, "is_bot": False, "first_name": "Lan"},
            "chat": {"id": 789, "type": "private"},
            "date": 1709280000,
            "text": text,
        },
    }


@pytest.fixture
def send_ok():
    return AsyncMock(return_value=OutboundSendResult(success=True, media_sent=0))


def test_messenger_verify_echoes_challenge(client):
    r = client.get(
        "/webhooks/messenger",
        params={
            "hub.mode": "subscribe",
            "hub.verify_token": "verify-me",
            "hub.challenge": "1158201444",
        },
    )
    assert r.status_code == 200
    assert r.text == "1158201444"


def test_messenger_verify_wrong_token(client):
    r = client.get(
        "/webhooks/messenger",
        params={"hub.mode": "subscribe", "hub.verify_token": "nope", "hub.challenge": "1"},
    )
    assert r.status_code == 403


def test_messenger_first_message_gets_intro(
    client, sales_module, send_ok, deepseek_backend
):
    put_module(client, sales_module)
    with patch(MESSENGER_SEND, send_ok):
        r = client.post("/webhooks/messenger", json=page_event(sales_module.channel_id))

    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    outbound = send_ok.await_args.args[0]
    assert outbound.channel == Channel.MESSENGER
    assert outbound.external_user_id == "psid-1"
    assert "Áo sơ mi lụa" in outbound.text
    assert len(outbound.media_urls) == 3
    assert deepseek_backend.calls == []


def test_messenger_unknown_page_is_ignored(client, send_ok):
    with patch(MESSENGER_SEND, send_ok):
        r = client.post("/webhooks/messenger", json=page_event("999"))
    assert r.status_code == 200
    send_ok.assert_not_awaited()


def test_messenger_inactive_module_is_ignored(client, sales_module, send_ok):
    sales_module.is_active = False
    put_module(client, sales_module)
    with patch(MESSENGER_SEND, send_ok):
        client.post("/webhooks/messenger", json=page_event(sales_module.channel_id))
    send_ok.assert_not_awaited()


def test_messenger_invalid_payloads(client):
    r = client.post(
        "/webhooks/messenger",
        content=b"not json",
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 400
    r = client.post("/webhooks/messenger", json={"object": "page", "entry": "x"})
    assert r.status_code == 400
    r = client.post("/webhooks/messenger", json={"object": "user", "entry": []})
    assert r.status_code == 400


def test_messenger_signature_is_checked(
    module_store, conversation_store, registry, sales_module, send_ok
):
    settings = Settings(messenger_verify_token="v", messenger_app_secret="app-secret")
    state = AppState(module_store, conversation_store, registry=registry, settings=settings)
    with TestClient(create_app(testing=True, state=state)) as signed_client:
        put_module(signed_client, sales_module)
        body = json.dumps(page_event(sales_module.channel_id)).encode()
        digest = hmac.new(b"app-secret", body, hashlib.sha256).hexdigest()

        with patch(MESSENGER_SEND, send_ok):
            bad = signed_client.post(
                "/webhooks/messenger",
                content=body,
                headers={"X-Hub-Signature-256": "sha256=deadbeef"},
            )
            good = signed_client.post(
                "/webhooks/messenger",
                content=body,
                headers={"X-Hub-Signature-256": f"sha256={digest}"},
            )

    assert bad.status_code == 403
    assert good.status_code == 200
    send_ok.assert_awaited_once()


def test_orchestrator_failure_sends_apology(client, app_state, sales_module, send_ok):
    put_module(client, sales_module)
    failing = AsyncMock(side_effect=RuntimeError("store offline"))
    with patch.object(app_state.orchestrator, "handle_message", failing), patch(
        MESSENGER_SEND, send_ok
    ), patch("salesbot.commands.base_channel.report_exception") as report:
        r = client.post("/webhooks/messenger", json=page_event(sales_module.channel_id))

    assert r.status_code == 200
    assert send_ok.await_args.args[0].text == APOLOGY_TEXT
    report.assert_called_once()


def test_telegram_message_is_answered(client, untrained_module, send_ok):
    put_module(client, untrained_module)
    with patch(TELEGRAM_SEND, send_ok):
        r = client.post(
            f"/webhooks/telegram/{untrained_module.channel_id}", json=telegram_update()
        )
    assert r.status_code == 200
    outbound = send_ok.await_args.args[0]
    assert outbound.channel == Channel.TELEGRAM
    assert outbound.external_user_id == "789"
    assert untrained_module.name in outbound.text


def test_telegram_unknown_bot_is_404(client):
    r = client.post("/webhooks/telegram/42", json=telegram_update())
    assert r.status_code == 404


def test_telegram_invalid_update_is_400(client, untrained_module):
    put_module(client, untrained_module)
    r = client.post(
        f"/webhooks/telegram/{untrained_module.channel_id}", json={"update_id": 1}
    )
    assert r.status_code == 400
