"""
Provider gateway: picks a generation backend for a module and falls back once on failure.
"""

from __future__ import annotations

from typing import Sequence

from salesbot.config import Settings
from salesbot.core.registry import BackendRegistry
from salesbot.exceptions import ConfigurationError
from salesbot.infra.logging_config import get_logger
from salesbot.providers.base import GenerationBackend
from salesbot.providers.backends import (
    ClaudeBackend,
    DeepSeekBackend,
    GeminiBackend,
    LiteLLMBackend,
    OpenAIBackend,
)
from salesbot.schemas.generation import ChatTurn, GenerationResult
from salesbot.schemas.module import ProviderConfig, ProviderName

logger = get_logger("gateway")

DEFAULT_BACKEND = ProviderName.DEEPSEEK.value
FREE_PRIORITY = (ProviderName.DEEPSEEK.value, ProviderName.GEMINI.value)


class ProviderGateway:
    def __init__(
        self,
        registry: BackendRegistry,
        priority: Sequence[str] = FREE_PRIORITY,
        default: str = DEFAULT_BACKEND,
    ) -> None:
        self._registry = registry
        self._priority = tuple(priority)
        self._default = default

    @property
    def registry(self) -> BackendRegistry:
        return self._registry

    def _require(self, name: str) -> GenerationBackend:
        backend = self._registry.get(name)
        if backend is None:
            raise ConfigurationError(f"Generation backend not registered: {name}")
        return backend

    def _auto_select(self) -> str:
        default = self._registry.get(self._default)
        if default is not None and default.is_free:
            return self._default
        for name in self._priority:
            backend = self._registry.get(name)
            if backend is not None and backend.is_free:
                return name
        for backend in self._registry.list_backends():
            if backend.is_free:
                return backend.name
        return self._default

    def resolve(self, config: ProviderConfig) -> str:
        """
        Name of the backend that will serve config.

        Raises:
            ConfigurationError: an explicitly selected backend is not registered.
        """
        if config.provider != ProviderName.AUTO:
            return self._require(config.provider.value).name
        if config.auto_select:
            return self._auto_select()
        return self._default

    async def send(
        self,
        config: ProviderConfig,
        system_prompt: str,
        history: Sequence[ChatTurn],
    ) -> GenerationResult:
        primary = self.resolve(config)
        try:
            return await self._require(primary).send(
                config.request_for(primary), system_prompt, history
            )
        except Exception as e:
            fallback = config.fallback_provider.value if config.fallback_provider else None
            if (
                fallback is None
                or fallback == ProviderName.AUTO.value
                or fallback == primary
                or fallback not in self._registry
            ):
                raise
            logger.warning(
                "Backend %s failed (%s); falling back to %s", primary, e, fallback
            )
            return await self._require(fallback).send(
                config.request_for(fallback), system_prompt, history
            )


def build_default_registry(settings: Settings) -> BackendRegistry:
    registry = BackendRegistry()
    registry.register(DeepSeekBackend())
    registry.register(GeminiBackend())
    registry.register(OpenAIBackend())
    registry.register(ClaudeBackend())
    registry.register(
        LiteLLMBackend(
            api_key=settings.litellm_api_key, api_base=settings.litellm_api_base
        )
    )
    return registry
