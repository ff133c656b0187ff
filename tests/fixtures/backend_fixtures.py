"""Fixtures for generation backends and the provider gateway."""

import pytest

from salesbot.core.registry import BackendRegistry
from salesbot.exceptions import ProviderError
from salesbot.providers.base import GenerationBackend
from salesbot.providers.gateway import ProviderGateway
from salesbot.schemas.generation import GenerationMetadata, GenerationResult


class FakeBackend(GenerationBackend):
    """Records every call and answers with a fixed reply, or raises ProviderError when failing."""

    default_model = "fake-model"

    def __init__(self, name, is_free=True, reply=None, fail=False):
        self.name = name
        self.display_name = name.title()
        self.is_free = is_free
        self.reply = reply or f"reply from {name}"
        self.fail = fail
        self.calls = []

    async def send(self, request, system_prompt, history):
        self.calls.append((request, system_prompt, list(history)))
        if self.fail:
            raise ProviderError(self.name, '{"error": "upstream down"}', 503)
        return GenerationResult(
            content=self.reply,
            metadata=GenerationMetadata(
                provider=self.name,
                model=request.model or self.default_model,
                token_count=42,
                temperature=request.temperature or 0.7,
            ),
        )


@pytest.fixture(scope="function")
def deepseek_backend():
    return FakeBackend("deepseek")


@pytest.fixture(scope="function")
def gemini_backend():
    return FakeBackend("gemini")


@pytest.fixture(scope="function")
def openai_backend():
    return FakeBackend("openai", is_free=False)


@pytest.fixture(scope="function")
def registry(deepseek_backend, gemini_backend, openai_backend):
    registry = BackendRegistry()
    registry.register(deepseek_backend)
    registry.register(gemini_backend)
    registry.register(openai_backend)
    return registry


@pytest.fixture(scope="function")
def gateway(registry):
    return ProviderGateway(registry)
