"""Tests for backend resolution and single-hop fallback."""

import pytest

from salesbot.core.registry import BackendRegistry
from salesbot.exceptions import ConfigurationError, ProviderError
from salesbot.providers.gateway import ProviderGateway
from salesbot.schemas.generation import ChatTurn
from salesbot.schemas.module import BackendSettings, ProviderConfig, ProviderName
from tests.fixtures.backend_fixtures import FakeBackend

HISTORY = [ChatTurn(role="user", content="áo này giá bao nhiêu?")]


def test_auto_resolves_to_deepseek(gateway):
    config = ProviderConfig(provider=ProviderName.AUTO, auto_select=True)
    assert gateway.resolve(config) == "deepseek"
    assert gateway.resolve(config) == "deepseek"


def test_auto_skips_default_when_not_free():
    registry = BackendRegistry()
    registry.register(FakeBackend("deepseek", is_free=False))
    registry.register(FakeBackend("openai", is_free=False))
    registry.register(FakeBackend("gemini"))
    gateway = ProviderGateway(registry)
    assert gateway.resolve(ProviderConfig()) == "gemini"


def test_auto_uses_any_free_backend_outside_priority_list():
    registry = BackendRegistry()
    registry.register(FakeBackend("openai", is_free=False))
    registry.register(FakeBackend("litellm"))
    assert ProviderGateway(registry).resolve(ProviderConfig()) == "litellm"


def test_auto_without_free_backend_or_auto_select_gives_default(gateway):
    registry = BackendRegistry()
    registry.register(FakeBackend("openai", is_free=False))
    assert ProviderGateway(registry).resolve(ProviderConfig()) == "deepseek"
    config = ProviderConfig(provider=ProviderName.AUTO, auto_select=False)
    assert gateway.resolve(config) == "deepseek"


def test_explicit_backend_is_used_directly(gateway):
    assert gateway.resolve(ProviderConfig(provider=ProviderName.OPENAI)) == "openai"


def test_unregistered_explicit_backend_raises(gateway):
    with pytest.raises(ConfigurationError):
        gateway.resolve(ProviderConfig(provider=ProviderName.CLAUDE))


def test_registry_rejects_duplicate_names():
    registry = BackendRegistry()
    registry.register(FakeBackend("deepseek"))
    with pytest.raises(ValueError):
        registry.register(FakeBackend("deepseek"))


@pytest.mark.asyncio
async def test_send_passes_per_backend_request(gateway, openai_backend):
    config = ProviderConfig(
        provider=ProviderName.OPENAI,
        api_key="sk-shared",
        temperature=0.2,
        backends={"openai": BackendSettings(model="gpt-4o", api_key="sk-openai")},
    )
    result = await gateway.send(config, "system", HISTORY)

    assert result.content == "reply from openai"
    request, system_prompt, history = openai_backend.calls[0]
    assert request.api_key == "sk-openai"
    assert request.model == "gpt-4o"
    assert request.temperature == 0.2
    assert system_prompt == "system"
    assert history == HISTORY


@pytest.mark.asyncio
async def test_fallback_result_returned_when_primary_fails(
    gateway, deepseek_backend, gemini_backend
):
    deepseek_backend.fail = True
    config = ProviderConfig(fallback_provider=ProviderName.GEMINI)

    result = await gateway.send(config, "system", HISTORY)

    assert result.content == "reply from gemini"
    assert result.metadata.provider == "gemini"
    assert len(deepseek_backend.calls) == 1
    assert len(gemini_backend.calls) == 1


@pytest.mark.asyncio
async def test_fallback_failure_is_raised_without_more_retries(
    gateway, deepseek_backend, gemini_backend, openai_backend
):
    deepseek_backend.fail = True
    gemini_backend.fail = True
    config = ProviderConfig(fallback_provider=ProviderName.GEMINI)

    with pytest.raises(ProviderError) as exc_info:
        await gateway.send(config, "system", HISTORY)

    assert exc_info.value.provider == "gemini"
    assert len(deepseek_backend.calls) == 1
    assert len(gemini_backend.calls) == 1
    assert openai_backend.calls == []


@pytest.mark.asyncio
async def test_no_fallback_when_unset_or_same_or_unregistered(gateway, deepseek_backend):
    deepseek_backend.fail = True
    for fallback in (None, ProviderName.DEEPSEEK, ProviderName.CLAUDE):
        config = ProviderConfig(fallback_provider=fallback)
        with pytest.raises(ProviderError):
            await gateway.send(config, "system", HISTORY)
    assert len(deepseek_backend.calls) == 3
