"""Concrete generation backends. Each maps a vendor onto a pydantic-ai model."""

from __future__ import annotations

from typing import Optional

from pydantic_ai.models import Model
from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.anthropic import AnthropicProvider
from pydantic_ai.providers.deepseek import DeepSeekProvider
from pydantic_ai.providers.google import GoogleProvider
from pydantic_ai.providers.litellm import LiteLLMProvider
from pydantic_ai.providers.openai import OpenAIProvider

from salesbot.providers.agent_backend import AgentBackend
from salesbot.schemas.generation import GenerationRequest


class DeepSeekBackend(AgentBackend):
    name = "deepseek"
    display_name = "DeepSeek"
    is_free = True
    default_model = "deepseek-chat"

    def build_model(self, api_key: str, model_name: str) -> Model:
        return OpenAIChatModel(model_name, provider=DeepSeekProvider(api_key=api_key))


class GeminiBackend(AgentBackend):
    name = "gemini"
    display_name = "Google Gemini"
    is_free = True
    default_model = "gemini-2.0-flash"

    def build_model(self, api_key: str, model_name: str) -> Model:
        return GoogleModel(model_name, provider=GoogleProvider(api_key=api_key))


class OpenAIBackend(AgentBackend):
    name = "openai"
    display_name = "OpenAI"
    is_free = False
    default_model = "gpt-4o-mini"

    def build_model(self, api_key: str, model_name: str) -> Model:
        return OpenAIChatModel(model_name, provider=OpenAIProvider(api_key=api_key))


class ClaudeBackend(AgentBackend):
    name = "claude"
    display_name = "Anthropic Claude"
    is_free = False
    default_model = "claude-sonnet-4-20250514"

    def build_model(self, api_key: str, model_name: str) -> Model:
        return AnthropicModel(model_name, provider=AnthropicProvider(api_key=api_key))


class LiteLLMBackend(AgentBackend):
    """Any model behind a LiteLLM proxy. Falls back to the deployment-wide key and base URL."""

    name = "litellm"
    display_name = "LiteLLM"
    is_free = False
    default_model = "gpt-4o-mini"

    def __init__(
        self, api_key: Optional[str] = None, api_base: Optional[str] = None
    ) -> None:
        self._api_key = api_key
        self._api_base = api_base

    def resolve_api_key(self, request: GenerationRequest) -> Optional[str]:
        return request.api_key or self._api_key

    def build_model(self, api_key: str, model_name: str) -> Model:
        provider = LiteLLMProvider(api_key=api_key, api_base=self._api_base)
        return OpenAIChatModel(model_name, provider=provider)
