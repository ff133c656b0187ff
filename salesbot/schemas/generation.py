"""Normalized request/response contracts shared by every generation backend."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel

ChatRole = Literal["user", "assistant"]


class ChatTurn(BaseModel):
    role: ChatRole
    content: str


class GenerationRequest(BaseModel):
    api_key: Optional[str] = None
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


class GenerationMetadata(BaseModel):
    provider: str
    model: str
    token_count: int = 0
    temperature: float


class GenerationResult(BaseModel):
    content: str
    metadata: GenerationMetadata
