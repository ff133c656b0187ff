from __future__ import annotations

import json
from abc import abstractmethod
from typing import Any, List, Optional, Sequence

import httpx
from pydantic_ai import Agent
from pydantic_ai.exceptions import AgentRunError, ModelHTTPError
from pydantic_ai.messages import (
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    UserPromptPart,
)
from pydantic_ai.models import Model
from pydantic_ai.settings import ModelSettings

from salesbot.exceptions import ConfigurationError, ProviderError
from salesbot.infra.logging_config import get_logger
from salesbot.providers.base import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    GenerationBackend,
)
from salesbot.schemas.generation import (
    ChatTurn,
    GenerationMetadata,
    GenerationRequest,
    GenerationResult,
)

logger = get_logger("providers")


def _history_to_message_list(history: Sequence[ChatTurn]) -> List[Any]:
    """Convert role/content turns to pydantic_ai ModelMessage list for message_history."""
    out: List[Any] = []
    for turn in history:
        content = (turn.content or "").strip()
        if not content:
            continue
        if turn.role == "user":
            out.append(ModelRequest(parts=[UserPromptPart(content=content)]))
        else:
            out.append(ModelResponse(parts=[TextPart(content=content)]))
    return out


def _message_list_with_system_prompt(
    system_prompt: str, history: Sequence[ChatTurn]
) -> List[Any]:
    """Build message_history with system prompt always first, then conversation history."""

    # pydantic-ai ignores Agent(system_prompt=...) once message_history is given,
    # so the prompt travels as the first request.
    # https://ai.pydantic.dev/agent/#system-prompts
    system_message = ModelRequest(parts=[SystemPromptPart(content=system_prompt)])
    return [system_message] + _history_to_message_list(history)


def _split_prompt(history: Sequence[ChatTurn]) -> tuple[list[ChatTurn], Optional[str]]:
    """Separate the trailing user turn (the prompt to answer) from earlier history."""
    turns = list(history)
    if turns and turns[-1].role == "user":
        return turns[:-1], turns[-1].content
    return turns, None


def _raw_error(error: ModelHTTPError) -> str:
    body = error.body
    if body is None:
        return str(error)
    if isinstance(body, (dict, list)):
        return json.dumps(body, ensure_ascii=False, default=str)
    return str(body)


class AgentBackend(GenerationBackend):
    """Backend that runs a single pydantic-ai Agent turn against a vendor model."""

    @abstractmethod
    def build_model(self, api_key: str, model_name: str) -> Model:
        """Return the pydantic-ai model for this vendor."""
        ...

    def resolve_api_key(self, request: GenerationRequest) -> Optional[str]:
        return request.api_key

    async def send(
        self,
        request: GenerationRequest,
        system_prompt: str,
        history: Sequence[ChatTurn],
    ) -> GenerationResult:
        api_key = self.resolve_api_key(request)
        if not api_key:
            raise ConfigurationError(f"{self.display_name} API key is not configured")

        model_name = request.model or self.default_model
        temperature = (
            request.temperature
            if request.temperature is not None
            else DEFAULT_TEMPERATURE
        )
        max_tokens = request.max_tokens or DEFAULT_MAX_TOKENS

        earlier, prompt = _split_prompt(history)
        message_history = _message_list_with_system_prompt(system_prompt, earlier)
        agent = Agent(self.build_model(api_key, model_name))
        logger.info("Sending request to %s (model=%s)", self.name, model_name)
        try:
            result = await agent.run(
                prompt,
                message_history=message_history,
                model_settings=ModelSettings(
                    temperature=temperature, max_tokens=max_tokens
                ),
            )
        except ModelHTTPError as e:
            raise ProviderError(self.name, _raw_error(e), e.status_code) from e
        except (AgentRunError, httpx.HTTPError) as e:
            raise ProviderError(self.name, str(e)) from e

        return GenerationResult(
            content=str(result.output).strip(),
            metadata=GenerationMetadata(
                provider=self.name,
                model=model_name,
                token_count=result.usage.total_tokens or 0,
                temperature=temperature,
            ),
        )
