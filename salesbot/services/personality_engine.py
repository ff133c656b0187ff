"""
Customer personality inference from keyword hits.

analyze() scores a full message history from scratch; update() blends a single
new user message into an existing profile. Keyword matching is substring-based
over lowercased text and counts each distinct keyword once.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from salesbot.schemas.conversation import (
    CommunicationStyle,
    CustomerPersonality,
    Message,
    Priorities,
    Tone,
    Traits,
)

TRAIT_MAX = 10.0

STYLE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "direct": ("giá", "bao nhiêu", "có không", "mua", "đặt", "giao", "ship"),
    "polite": ("xin chào", "cảm ơn", "vui lòng", "xin lỗi", "cho tôi", "bạn có thể"),
    "casual": ("ok", "oke", "okay", "đc", "được", "👍", "😊", "❤️"),
    "formal": ("quý khách", "quý anh/chị", "trân trọng", "kính chào"),
}

TONE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "positive": ("tốt", "đẹp", "thích", "ok", "tuyệt", "👍", "❤️", "😊"),
    "negative": ("không", "chưa", "sao", "lỗi", "hỏng", "sai", "kém"),
    "curious": ("là gì", "như thế nào", "tại sao", "có thể", "có được không", "?"),
    "hesitant": ("có lẽ", "có thể", "suy nghĩ", "để xem", "chưa chắc"),
}

PRIORITY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "price": ("giá", "rẻ", "đắt", "tiền", "phí", "giảm", "sale", "khuyến mãi"),
    "quality": ("chất lượng", "tốt", "bền", "đẹp", "cao cấp", "premium"),
    "speed": ("nhanh", "giao", "ship", "vận chuyển", "thời gian", "khi nào"),
    "service": ("dịch vụ", "hỗ trợ", "tư vấn", "chăm sóc", "bảo hành"),
}

# trait -> (keywords, weight per hit)
TRAIT_KEYWORDS: dict[str, tuple[tuple[str, ...], float]] = {
    "decisive": (("mua", "đặt", "ok", "được", "chốt", "xác nhận"), 2),
    "detail_oriented": (
        ("màu", "size", "kích thước", "chất liệu", "xuất xứ", "bảo hành", "đổi trả"),
        1.5,
    ),
    "price_sensitive": (
        ("giá", "rẻ", "đắt", "giảm", "sale", "khuyến mãi", "ưu đãi"),
        2,
    ),
    "brand_loyal": (("thương hiệu", "uy tín", "độ tin cậy", "review", "đánh giá"), 2),
}

# Numeric scales used to blend categorical fields. Mapping back picks the nearest score.
STYLE_SCORES: dict[str, float] = {
    "direct": 1,
    "polite": 2,
    "friendly": 2.5,
    "casual": 3,
    "formal": 4,
}
TONE_SCORES: dict[str, float] = {
    "negative": 1,
    "hesitant": 2,
    "neutral": 3,
    "curious": 4,
    "positive": 5,
}

STYLE_WEIGHT = 0.3
TONE_WEIGHT = 0.4
PRIORITY_WEIGHT = 0.3
TRAIT_WEIGHT = 0.3
CONFIDENCE_STEP = 0.1


def default_personality() -> CustomerPersonality:
    return CustomerPersonality(
        communication_style="friendly",
        tone="neutral",
        priorities=Priorities(price=5, quality=5, speed=5, service=5),
        traits=Traits(decisive=5, detail_oriented=5, price_sensitive=5, brand_loyal=5),
        confidence=0.1,
    )


def count_keywords(text: str, keywords: Iterable[str]) -> int:
    return sum(1 for keyword in keywords if keyword in text)


def _classify_style(text: str, messages: Sequence[Message]) -> CommunicationStyle:
    avg_length = sum(len(m.content) for m in messages) / len(messages)
    if count_keywords(text, STYLE_KEYWORDS["direct"]) > 3 and avg_length < 50:
        return "direct"
    if count_keywords(text, STYLE_KEYWORDS["polite"]) > 2:
        return "polite"
    if count_keywords(text, STYLE_KEYWORDS["casual"]) > 2:
        return "casual"
    if count_keywords(text, STYLE_KEYWORDS["formal"]) > 1:
        return "formal"
    return "friendly"


def _classify_tone(text: str) -> Tone:
    if count_keywords(text, TONE_KEYWORDS["negative"]) > 2:
        return "negative"
    if count_keywords(text, TONE_KEYWORDS["curious"]) > 2:
        return "curious"
    if count_keywords(text, TONE_KEYWORDS["hesitant"]) > 1:
        return "hesitant"
    if count_keywords(text, TONE_KEYWORDS["positive"]) > 1:
        return "positive"
    return "neutral"


def _score_priorities(text: str) -> Priorities:
    return Priorities(
        **{
            name: count_keywords(text, keywords) * 2
            for name, keywords in PRIORITY_KEYWORDS.items()
        }
    )


def _score_traits(text: str) -> Traits:
    return Traits(
        **{
            name: min(TRAIT_MAX, count_keywords(text, keywords) * weight)
            for name, (keywords, weight) in TRAIT_KEYWORDS.items()
        }
    )


def _nearest(scores: dict[str, float], value: float) -> str:
    # Ties resolve to the first entry in table order.
    return min(scores, key=lambda name: abs(scores[name] - value))


def _blend(current: float, new: float, weight: float) -> float:
    return current * (1 - weight) + new * weight


def analyze(messages: Sequence[Message]) -> CustomerPersonality:
    """Score a personality from scratch over the user-authored messages."""
    user_messages = [m for m in messages if m.role == "user"]
    if not user_messages:
        return default_personality()

    text = " ".join(m.content.lower() for m in user_messages)
    return CustomerPersonality(
        communication_style=_classify_style(text, user_messages),
        tone=_classify_tone(text),
        priorities=_score_priorities(text),
        traits=_score_traits(text),
        confidence=min(1.0, len(user_messages) / 10),
    )


def update(current: CustomerPersonality, message: Message) -> CustomerPersonality:
    """Blend one new message into an existing profile. Non-user messages leave it unchanged."""
    if message.role != "user":
        return current.model_copy(deep=True)

    fresh = analyze([message])

    style_score = _blend(
        STYLE_SCORES[current.communication_style],
        STYLE_SCORES[fresh.communication_style],
        STYLE_WEIGHT,
    )
    tone_score = _blend(TONE_SCORES[current.tone], TONE_SCORES[fresh.tone], TONE_WEIGHT)

    priorities = Priorities(
        **{
            name: _blend(
                getattr(current.priorities, name),
                getattr(fresh.priorities, name),
                PRIORITY_WEIGHT,
            )
            for name in PRIORITY_KEYWORDS
        }
    )
    traits = Traits(
        **{
            name: min(
                TRAIT_MAX,
                max(
                    0.0,
                    _blend(
                        getattr(current.traits, name),
                        getattr(fresh.traits, name),
                        TRAIT_WEIGHT,
                    ),
                ),
            )
            for name in TRAIT_KEYWORDS
        }
    )

    return CustomerPersonality(
        communication_style=_nearest(STYLE_SCORES, style_score),
        tone=_nearest(TONE_SCORES, tone_score),
        priorities=priorities,
        traits=traits,
        confidence=min(1.0, current.confidence + CONFIDENCE_STEP),
    )
