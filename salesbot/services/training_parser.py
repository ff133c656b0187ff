"""
Parse merchant training text into TrainingData.

The text is a loose form of "Label: value" lines. Multi-line values continue
until a blank line or the next label. A value that cannot be understood
(an unknown tone, a price such as "Liên hệ") leaves that one field at its
default; the rest of its section is kept.

Example:

    Tên sản phẩm: Áo thun Basic
    Mô tả: Áo cotton 100%,
    thoáng mát.
    Giá: 199.000 VND
    Màu sắc: Xanh, Đỏ, Trắng
    Tính năng:
    - Chống nhăn
    - Co giãn 4 chiều

    Giọng điệu: thân thiện
    Emoji: có

    Bước 1: Chào hỏi
    Chào khách thật nồng nhiệt
    Từ khóa: xin chào, hello

    Q: Có ship COD không?
    A: Có, ship COD toàn quốc.
"""

from __future__ import annotations

import re
from typing import Callable, Optional, TypeVar

from salesbot.constants.sales_flow import default_sales_flow
from salesbot.exceptions import ParsingError
from salesbot.infra.logging_config import get_logger
from salesbot.schemas.module import (
    CommunicationStyleProfile,
    ProductInfo,
    QuestionAnswer,
    SalesFlowStep,
    TrainingData,
)

logger = get_logger("training")

T = TypeVar("T")


def _label(*names: str) -> re.Pattern:
    alternatives = "|".join(sorted((re.escape(n) for n in names), key=len, reverse=True))
    return re.compile(rf"^\s*(?:{alternatives})\s*:\s*(.*)$", re.IGNORECASE)


NAME = _label("tên sản phẩm", "tên", "sản phẩm", "product name", "product", "name")
DESCRIPTION = _label("mô tả", "description", "giới thiệu")
PRICE = _label("giá bán", "giá", "price")
VARIANTS = _label("biến thể", "variants", "variant", "màu sắc", "size", "kích thước")
FEATURES = _label("tính năng", "features", "feature", "đặc điểm")
TONE = _label("giọng điệu", "phong cách", "tone")
LANGUAGE = _label("ngôn ngữ", "language")
EMOJI = _label("emoji", "emojis", "biểu tượng")
ABBREVIATIONS = _label("từ viết tắt", "viết tắt", "abbreviations", "abbreviation")
TRIGGERS = _label("từ khóa", "triggers", "trigger", "keywords", "keyword")
QUESTION = _label("câu hỏi", "hỏi", "q")
ANSWER = _label("trả lời", "đáp", "a")
STEP = re.compile(r"^\s*(?:bước|step)\s*(\d+)\s*[:.\-]?\s*(.*)$", re.IGNORECASE)

LABELS = (
    NAME,
    DESCRIPTION,
    PRICE,
    VARIANTS,
    FEATURES,
    TONE,
    LANGUAGE,
    EMOJI,
    ABBREVIATIONS,
    TRIGGERS,
    QUESTION,
    ANSWER,
    STEP,
)

PRICE_VALUE = re.compile(r"^([\d.,]+)\s*(?:([a-zA-Z]{3})(?![a-zA-Z]))?")
LIST_SPLIT = re.compile(r"[,\n•]")
BULLET = re.compile(r"^\s*[-*•+]\s*")

TONE_VALUES = {
    "professional": "professional",
    "chuyên nghiệp": "professional",
    "friendly": "friendly",
    "thân thiện": "friendly",
    "casual": "casual",
    "thân mật": "casual",
    "formal": "formal",
    "trang trọng": "formal",
}
LANGUAGE_VALUES = {
    "vietnamese": "vietnamese",
    "tiếng việt": "vietnamese",
    "english": "english",
    "tiếng anh": "english",
    "mixed": "mixed",
    "hỗn hợp": "mixed",
}
YES_VALUES = ("yes", "true", "có")
NO_VALUES = ("no", "false", "không")


def _is_label(line: str) -> bool:
    return any(pattern.match(line) for pattern in LABELS)


def _block(lines: list[str], pattern: re.Pattern) -> Optional[str]:
    """Value of the first line matching pattern, joined with its continuation lines."""
    for index, line in enumerate(lines):
        match = pattern.match(line)
        if not match:
            continue
        parts = [match.group(1).strip()] if match.group(1).strip() else []
        for follow in lines[index + 1 :]:
            if not follow.strip() or _is_label(follow):
                break
            parts.append(follow.strip())
        return "\n".join(parts)
    return None


def _value(lines: list[str], pattern: re.Pattern) -> Optional[str]:
    for line in lines:
        match = pattern.match(line)
        if match and match.group(1).strip():
            return match.group(1).strip()
    return None


def _split_list(value: str) -> list[str]:
    items = []
    for piece in LIST_SPLIT.split(value):
        piece = BULLET.sub("", piece).strip()
        if piece:
            items.append(piece)
    return items


def parse_price(value: str) -> tuple[float, Optional[str]]:
    """Parse '1.500.000 VND', '1,500,000', '199.99 usd' into (amount, currency)."""
    match = PRICE_VALUE.match(value.strip())
    if not match:
        raise ParsingError(f"Unrecognized price: {value!r}")
    number, currency = match.group(1).strip(".,"), match.group(2)
    if not number:
        raise ParsingError(f"Unrecognized price: {value!r}")
    groups = re.split(r"[.,]", number)
    if len(groups) > 1 and all(len(g) == 3 for g in groups[1:]):
        amount = float("".join(groups))
    elif len(groups) > 1:
        amount = float("".join(groups[:-1]) + "." + groups[-1])
    else:
        amount = float(number)
    return amount, currency.upper() if currency else None


def _product_info(lines: list[str]) -> Optional[ProductInfo]:
    name = _value(lines, NAME)
    if name is None:
        return None
    info = ProductInfo(name=name)
    description = _block(lines, DESCRIPTION)
    if description:
        info.description = description
    price = _value(lines, PRICE)
    if price is not None:
        info.price, currency = _field(
            "price", lambda: parse_price(price), (info.price, None)
        )
        if currency:
            info.currency = currency
    variants = _block(lines, VARIANTS)
    if variants:
        info.variants = _split_list(variants)
    features = _block(lines, FEATURES)
    if features:
        info.features = _split_list(features)
    return info


def _lookup(table: dict[str, str], value: str, label: str) -> str:
    lowered = value.lower()
    for key, mapped in table.items():
        if key in lowered:
            return mapped
    raise ParsingError(f"Unrecognized {label}: {value!r}")


def _parse_yes_no(value: str) -> bool:
    lowered = value.lower()
    if lowered.startswith(YES_VALUES):
        return True
    if lowered.startswith(NO_VALUES):
        return False
    raise ParsingError(f"Unrecognized emoji setting: {value!r}")


def _communication_style(lines: list[str]) -> Optional[CommunicationStyleProfile]:
    tone = _value(lines, TONE)
    language = _value(lines, LANGUAGE)
    emoji = _value(lines, EMOJI)
    abbreviations = _value(lines, ABBREVIATIONS)
    if tone is None and language is None and emoji is None and abbreviations is None:
        return None
    style = CommunicationStyleProfile()
    if tone is not None:
        style.tone = _field(
            "tone", lambda: _lookup(TONE_VALUES, tone, "tone"), style.tone
        )
    if language is not None:
        style.language = _field(
            "language",
            lambda: _lookup(LANGUAGE_VALUES, language, "language"),
            style.language,
        )
    if emoji is not None:
        style.use_emojis = _field(
            "emoji setting", lambda: _parse_yes_no(emoji), style.use_emojis
        )
    if abbreviations is not None:
        style.abbreviations = [a.strip() for a in abbreviations.split(",") if a.strip()]
    return style


def _sales_flow(lines: list[str]) -> list[SalesFlowStep]:
    steps: list[SalesFlowStep] = []
    current: Optional[dict] = None
    for line in lines + [""]:
        match = STEP.match(line)
        if match:
            if current is not None:
                steps.append(_build_step(current))
            current = {
                "step": int(match.group(1)),
                "name": match.group(2).strip(),
                "description": [],
                "triggers": [],
            }
            continue
        if current is None:
            continue
        if not line.strip() or (_is_label(line) and not TRIGGERS.match(line)):
            steps.append(_build_step(current))
            current = None
            continue
        trigger = TRIGGERS.match(line)
        if trigger:
            current["triggers"].extend(
                t.strip() for t in trigger.group(1).split(",") if t.strip()
            )
        else:
            current["description"].append(line.strip())
    return sorted(steps, key=lambda s: s.step)


def _build_step(raw: dict) -> SalesFlowStep:
    name = raw["name"] or f"Bước {raw['step']}"
    return SalesFlowStep(
        step=raw["step"],
        name=name,
        description="\n".join(raw["description"]) or name,
        triggers=raw["triggers"],
    )


def _common_questions(lines: list[str]) -> list[QuestionAnswer]:
    questions: list[QuestionAnswer] = []
    index = 0
    while index < len(lines):
        question = QUESTION.match(lines[index])
        index += 1
        if not question or not question.group(1).strip():
            continue
        # The answer is the next non-blank line, if it is labeled as one.
        while index < len(lines) and not lines[index].strip():
            index += 1
        if index >= len(lines):
            break
        answer = ANSWER.match(lines[index])
        if not answer:
            continue
        parts = [answer.group(1).strip()]
        index += 1
        while index < len(lines) and lines[index].strip() and not _is_label(lines[index]):
            parts.append(lines[index].strip())
            index += 1
        questions.append(
            QuestionAnswer(
                question=question.group(1).strip(),
                answer="\n".join(p for p in parts if p),
            )
        )
    return questions


def _field(name: str, parse: Callable[[], T], default: T) -> T:
    try:
        return parse()
    except ParsingError as e:
        logger.warning("Keeping default %s in training text: %s", name, e)
        return default


def parse_training_text(raw_text: str) -> TrainingData:
    lines = raw_text.strip().splitlines()
    product_info = _product_info(lines)
    sales_flow = _sales_flow(lines)
    if not sales_flow:
        sales_flow = default_sales_flow()
    return TrainingData(
        product_info=product_info,
        sales_flow=sales_flow,
        communication_style=_communication_style(lines),
        common_questions=_common_questions(lines),
        raw_text=raw_text,
    )
