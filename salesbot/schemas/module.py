"""Pydantic schemas for a merchant's sales module: catalog, media, training data, backend config."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field

from salesbot.schemas.conversa import Channel
from salesbot.schemas.generation import GenerationRequest


class ProviderName(str, Enum):
    """Generation backends a module can select. AUTO lets the gateway choose."""

    DEEPSEEK = "deepseek"
    GEMINI = "gemini"
    OPENAI = "openai"
    CLAUDE = "claude"
    LITELLM = "litellm"
    AUTO = "auto"


# -----------------------------------------------------------------------------
# Catalog
# -----------------------------------------------------------------------------


class ProductVariant(BaseModel):
    """A purchasable variant, e.g. name "Màu xanh", value "blue"."""

    id: str
    name: str
    value: str
    price: Optional[float] = None  # overrides Product.price when set
    stock: Optional[int] = None


class Product(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float = 0
    currency: str = "VND"
    variants: list[ProductVariant] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    category: Optional[str] = None


MediaKind = Literal["image", "video"]


class MediaMetadata(BaseModel):
    """Searchable metadata attached to a media item by the merchant."""

    colors: list[str] = Field(default_factory=list)
    product_ids: list[str] = Field(default_factory=list)
    variants: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    description: Optional[str] = None
    ai_tags: list[str] = Field(default_factory=list)


class MediaItem(BaseModel):
    id: str
    kind: MediaKind = "image"
    url: str
    thumbnail_url: Optional[str] = None
    file_name: str = ""
    file_size: int = 0
    metadata: MediaMetadata = Field(default_factory=MediaMetadata)


# -----------------------------------------------------------------------------
# Training data
# -----------------------------------------------------------------------------


class ProductInfo(BaseModel):
    name: str
    description: str = ""
    price: float = 0
    currency: str = "VND"
    variants: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)


class SalesFlowStep(BaseModel):
    step: int
    name: str
    description: str
    triggers: list[str] = Field(default_factory=list)


class CommunicationStyleProfile(BaseModel):
    tone: Literal["professional", "friendly", "casual", "formal"] = "friendly"
    language: Literal["vietnamese", "english", "mixed"] = "vietnamese"
    use_emojis: bool = True
    abbreviations: list[str] = Field(default_factory=list)


class QuestionAnswer(BaseModel):
    question: str
    answer: str


class TrainingData(BaseModel):
    """Structured form of the merchant's training text, consumed by the prompt compiler."""

    product_info: Optional[ProductInfo] = None
    sales_flow: list[SalesFlowStep] = Field(default_factory=list)
    communication_style: Optional[CommunicationStyleProfile] = None
    common_questions: list[QuestionAnswer] = Field(default_factory=list)
    raw_text: Optional[str] = None


# -----------------------------------------------------------------------------
# Generation backend configuration
# -----------------------------------------------------------------------------


class BackendSettings(BaseModel):
    """Per-backend override of key, model, temperature and token limit."""

    api_key: Optional[str] = None
    model: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    max_tokens: Optional[int] = Field(default=None, ge=1)


class ProviderConfig(BackendSettings):
    """Backend selection for a module. Top-level key/model/etc. apply to every backend."""

    provider: ProviderName = ProviderName.AUTO
    auto_select: bool = True
    fallback_provider: Optional[ProviderName] = None
    backends: dict[str, BackendSettings] = Field(default_factory=dict)

    def request_for(self, backend: str) -> GenerationRequest:
        """Build the normalized request for one backend, per-backend values first."""
        override = self.backends.get(backend) or BackendSettings()
        return GenerationRequest(
            api_key=override.api_key or self.api_key,
            model=override.model or self.model,
            temperature=(
                override.temperature
                if override.temperature is not None
                else self.temperature
            ),
            max_tokens=override.max_tokens or self.max_tokens,
        )


# -----------------------------------------------------------------------------
# Module
# -----------------------------------------------------------------------------


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SalesModule(BaseModel):
    """A merchant's configured sales agent. Read-only to the conversation pipeline."""

    id: str
    name: str
    description: Optional[str] = None
    is_active: bool = True

    channel: Channel = Channel.MESSENGER
    channel_id: Optional[str] = None  # Messenger page id / Telegram bot id
    channel_name: Optional[str] = None
    access_token: Optional[str] = None  # page access token / bot token

    ai_provider: ProviderConfig = Field(default_factory=ProviderConfig)
    products: list[Product] = Field(default_factory=list)
    media: list[MediaItem] = Field(default_factory=list)
    training_data: Optional[TrainingData] = None

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class SalesModuleWrite(BaseModel):
    """Body of PUT /modules/{id}. The path supplies the id; timestamps are managed."""

    name: str
    description: Optional[str] = None
    is_active: bool = True
    channel: Channel = Channel.MESSENGER
    channel_id: Optional[str] = None
    channel_name: Optional[str] = None
    access_token: Optional[str] = None
    ai_provider: ProviderConfig = Field(default_factory=ProviderConfig)
    products: list[Product] = Field(default_factory=list)
    media: list[MediaItem] = Field(default_factory=list)
    training_data: Optional[TrainingData] = None


class TrainingTextIn(BaseModel):
    raw_text: str = Field(min_length=1)


class PromptPreview(BaseModel):
    module_id: str
    prompt: str
