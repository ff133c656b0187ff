"""Tests for pydantic-ai backed generation backends."""

import pytest
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.messages import (
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    UserPromptPart,
)
from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.models.function import FunctionModel
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.models.test import TestModel

from salesbot.exceptions import ConfigurationError, ProviderError
from salesbot.providers.backends import (
    ClaudeBackend,
    DeepSeekBackend,
    LiteLLMBackend,
)
from salesbot.providers.gateway import build_default_registry
from salesbot.schemas.generation import ChatTurn, GenerationRequest

HISTORY = [
    ChatTurn(role="assistant", content="[Tóm tắt cuộc trò chuyện trước]: chào hỏi"),
    ChatTurn(role="user", content="chào shop"),
    ChatTurn(role="assistant", content="dạ em chào anh/chị"),
    ChatTurn(role="user", content="áo này giá bao nhiêu?"),
]


class ScriptedDeepSeek(DeepSeekBackend):
    """DeepSeek backend answering through a local pydantic-ai model."""

    def __init__(self, model):
        self.model = model
        self.built_with = None

    def build_model(self, api_key, model_name):
        self.built_with = (api_key, model_name)
        return self.model


@pytest.mark.asyncio
async def test_send_builds_history_with_system_prompt_first():
    seen = {}

    def respond(messages, info):
        seen["messages"] = messages
        seen["settings"] = info.model_settings
        return ModelResponse(parts=[TextPart(content="  Dạ 450.000đ ạ  ")])

    backend = ScriptedDeepSeek(FunctionModel(respond))
    result = await backend.send(
        GenerationRequest(api_key="sk-test"), "Bạn là nhân viên bán hàng", HISTORY
    )

    assert result.content == "Dạ 450.000đ ạ"
    assert result.metadata.token_count > 0
    assert result.metadata.provider == "deepseek"
    assert result.metadata.model == "deepseek-chat"
    assert result.metadata.temperature == 0.7
    assert backend.built_with == ("sk-test", "deepseek-chat")

    messages = seen["messages"]
    assert isinstance(messages[0], ModelRequest)
    assert isinstance(messages[0].parts[0], SystemPromptPart)
    assert messages[0].parts[0].content == "Bạn là nhân viên bán hàng"
    assert isinstance(messages[1], ModelResponse)
    assert isinstance(messages[-1], ModelRequest)
    last_part = messages[-1].parts[-1]
    assert isinstance(last_part, UserPromptPart)
    assert last_part.content == "áo này giá bao nhiêu?"
    assert seen["settings"]["temperature"] == 0.7
    assert seen["settings"]["max_tokens"] == 2000


@pytest.mark.asyncio
async def test_send_honours_request_overrides():
    backend = ScriptedDeepSeek(TestModel(custom_output_text="ok"))
    result = await backend.send(
        GenerationRequest(api_key="sk", model="deepseek-reasoner", temperature=0.1),
        "system",
        HISTORY,
    )
    assert result.content == "ok"
    assert result.metadata.model == "deepseek-reasoner"
    assert result.metadata.temperature == 0.1
    assert result.metadata.token_count >= 0


@pytest.mark.asyncio
async def test_missing_api_key_raises_before_building_model():
    backend = ScriptedDeepSeek(TestModel())
    with pytest.raises(ConfigurationError):
        await backend.send(GenerationRequest(), "system", HISTORY)
    assert backend.built_with is None


@pytest.mark.asyncio
async def test_vendor_http_error_becomes_provider_error():
    def fail(messages, info):
        raise ModelHTTPError(
            status_code=429, model_name="deepseek-chat", body={"error": "rate limited"}
        )

    backend = ScriptedDeepSeek(FunctionModel(fail))
    with pytest.raises(ProviderError) as exc_info:
        await backend.send(GenerationRequest(api_key="sk"), "system", HISTORY)

    assert exc_info.value.provider == "deepseek"
    assert exc_info.value.status_code == 429
    assert "rate limited" in exc_info.value.raw_error


def test_litellm_falls_back_to_deployment_key():
    backend = LiteLLMBackend(api_key="sk-proxy", api_base="http://litellm:4000")
    assert backend.resolve_api_key(GenerationRequest()) == "sk-proxy"
    assert backend.resolve_api_key(GenerationRequest(api_key="sk-module")) == "sk-module"
    assert DeepSeekBackend().resolve_api_key(GenerationRequest()) is None


def test_vendor_models_are_built_without_network():
    deepseek = DeepSeekBackend().build_model("sk", "deepseek-chat")
    claude = ClaudeBackend().build_model("sk", "claude-sonnet-4-20250514")
    assert isinstance(deepseek, OpenAIChatModel)
    assert deepseek.model_name == "deepseek-chat"
    assert isinstance(claude, AnthropicModel)


def test_default_registry_marks_free_backends(settings):
    registry = build_default_registry(settings)
    free = {b.name for b in registry.list_backends() if b.is_free}
    assert free == {"deepseek", "gemini"}
    assert {"openai", "claude", "litellm"} <= {b.name for b in registry.list_backends()}
