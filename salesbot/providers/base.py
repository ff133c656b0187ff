"""
Generation backend interface.

Backends take a normalized request plus a system prompt and role/content
history, and return a normalized GenerationResult. Vendor failures surface as
ProviderError; a missing API key is a ConfigurationError raised before any
network call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from salesbot.schemas.generation import ChatTurn, GenerationRequest, GenerationResult

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000


class GenerationBackend(ABC):
    """Contract for generation backends. New vendors implement this interface."""

    name: str
    display_name: str
    is_free: bool = False
    default_model: str

    @abstractmethod
    async def send(
        self,
        request: GenerationRequest,
        system_prompt: str,
        history: Sequence[ChatTurn],
    ) -> GenerationResult:
        """Generate the next assistant turn for history under system_prompt."""
        ...
