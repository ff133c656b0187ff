"""
Prompt compiler: turns a module's training data (and optionally the customer's
personality) into a single system instruction. Output is deterministic.
"""

from __future__ import annotations

from typing import Optional

from salesbot.constants.default_system_prompt import DefaultSystemPrompt
from salesbot.schemas.conversation import CustomerPersonality
from salesbot.schemas.module import (
    CommunicationStyleProfile,
    ProductInfo,
    QuestionAnswer,
    SalesFlowStep,
    SalesModule,
)

HIGHLIGHT_THRESHOLD = 7

TONE_LABELS = {
    "professional": "Chuyên nghiệp",
    "friendly": "Thân thiện",
    "casual": "Thân mật",
    "formal": "Trang trọng",
}
LANGUAGE_LABELS = {
    "vietnamese": "Tiếng Việt",
    "english": "Tiếng Anh",
    "mixed": "Hỗn hợp (Việt + Anh)",
}
CUSTOMER_STYLE_LABELS = {
    "direct": "Trực tiếp",
    "polite": "Lịch sự",
    "casual": "Thân mật",
    "formal": "Trang trọng",
    "friendly": "Thân thiện",
}
CUSTOMER_TONE_LABELS = {
    "positive": "Tích cực",
    "neutral": "Trung tính",
    "negative": "Tiêu cực",
    "curious": "Tò mò",
    "hesitant": "Do dự",
}
PRIORITY_LABELS = {
    "price": "Giá cả",
    "quality": "Chất lượng",
    "speed": "Tốc độ giao hàng",
    "service": "Dịch vụ",
}
TRAIT_LABELS = {
    "decisive": "Quyết đoán",
    "detail_oriented": "Chú ý chi tiết",
    "price_sensitive": "Nhạy cảm về giá",
    "brand_loyal": "Trung thành thương hiệu",
}
STYLE_GUIDANCE = {
    "direct": "- Khách hàng thích giao tiếp trực tiếp, đi thẳng vào vấn đề. Tránh dài dòng.",
    "polite": "- Khách hàng thích giao tiếp lịch sự. Sử dụng ngôn ngữ trang trọng hơn.",
    "casual": "- Khách hàng thích giao tiếp thân mật. Có thể dùng ngôn ngữ tự nhiên hơn.",
}
PRICE_SENSITIVE_GUIDANCE = "- Khách hàng nhạy cảm về giá. Nhấn mạnh giá trị và ưu đãi."
DETAIL_ORIENTED_GUIDANCE = (
    "- Khách hàng chú ý chi tiết. Cung cấp thông tin đầy đủ và chính xác."
)

CLOSING_RULES = (
    "## QUY TẮC QUAN TRỌNG\n"
    "1. LUÔN gửi INTRO message đầy đủ (thông tin sản phẩm, hình ảnh, video) ở đầu mỗi cuộc trò chuyện mới, bất kể khách hàng nói gì.\n"
    "2. Hiểu ngữ cảnh và lịch sử trò chuyện để trả lời phù hợp.\n"
    "3. Nếu khách hỏi về màu sắc/sản phẩm cụ thể, tìm và gửi hình ảnh/video tương ứng.\n"
    "4. Trả lời ngắn gọn, tự nhiên, như một người thật.\n"
    "5. Hiểu được các từ viết tắt và lỗi chính tả tiếng Việt.\n"
    "6. Theo dõi quy trình bán hàng 8 bước và chuyển bước khi phù hợp.\n"
    "7. Không được tạo ra thông tin không có trong training data.\n"
    "8. Nếu không chắc chắn, hỏi lại khách hàng thay vì đoán.\n"
)


def format_price(value: float) -> str:
    """Format a price the vi-VN way: '.' groups thousands, ',' marks decimals."""
    rounded = round(value, 3)
    if rounded == int(rounded):
        return f"{int(rounded):,}".replace(",", ".")
    whole, fraction = f"{rounded:,.3f}".rstrip("0").split(".")
    return whole.replace(",", ".") + "," + fraction


def _product_block(info: ProductInfo) -> str:
    lines = ["## THÔNG TIN SẢN PHẨM", f"Tên sản phẩm: {info.name}"]
    if info.description:
        lines.append(f"Mô tả: {info.description}")
    lines.append(f"Giá: {format_price(info.price)} {info.currency}")
    if info.variants:
        lines.append(f"Các biến thể: {', '.join(info.variants)}")
    if info.features:
        lines.append(f"Tính năng: {', '.join(info.features)}")
    return "\n".join(lines) + "\n\n"


def _style_block(style: CommunicationStyleProfile) -> str:
    lines = [
        "## PHONG CÁCH GIAO TIẾP",
        f"- Giọng điệu: {TONE_LABELS.get(style.tone, style.tone)}",
        f"- Ngôn ngữ: {LANGUAGE_LABELS.get(style.language, style.language)}",
        f"- Sử dụng emoji: {'Có' if style.use_emojis else 'Không'}",
    ]
    if style.abbreviations:
        lines.append(
            f"- Các từ viết tắt thường dùng: {', '.join(style.abbreviations)}"
        )
    return "\n".join(lines) + "\n\n"


def _sales_flow_block(steps: list[SalesFlowStep]) -> str:
    lines = ["## QUY TRÌNH BÁN HÀNG (8 BƯỚC)"]
    for step in sorted(steps, key=lambda s: s.step):
        lines.append(f"Bước {step.step}: {step.name}")
        lines.append(f"  - {step.description}")
        if step.triggers:
            lines.append(f"  - Từ khóa chuyển bước: {', '.join(step.triggers)}")
    return "\n".join(lines) + "\n\n"


def _faq_block(questions: list[QuestionAnswer]) -> str:
    lines = ["## CÂU HỎI THƯỜNG GẶP"]
    for index, qa in enumerate(questions, start=1):
        lines.append(f"{index}. Q: {qa.question}")
        lines.append(f"   A: {qa.answer}")
    return "\n".join(lines) + "\n\n"


def _customer_block(personality: CustomerPersonality) -> str:
    priorities = [
        label
        for name, label in PRIORITY_LABELS.items()
        if getattr(personality.priorities, name) > HIGHLIGHT_THRESHOLD
    ]
    traits = [
        label
        for name, label in TRAIT_LABELS.items()
        if getattr(personality.traits, name) > HIGHLIGHT_THRESHOLD
    ]
    style = personality.communication_style
    lines = [
        "## THÔNG TIN KHÁCH HÀNG",
        f"- Phong cách giao tiếp: {CUSTOMER_STYLE_LABELS.get(style, style)}",
        f"- Tone: {CUSTOMER_TONE_LABELS.get(personality.tone, personality.tone)}",
        f"- Ưu tiên: {', '.join(priorities) if priorities else 'Chưa xác định'}",
        f"- Đặc điểm: {', '.join(traits) if traits else 'Bình thường'}",
        "",
        "## HƯỚNG DẪN GIAO TIẾP",
    ]
    if style in STYLE_GUIDANCE:
        lines.append(STYLE_GUIDANCE[style])
    if personality.traits.price_sensitive > HIGHLIGHT_THRESHOLD:
        lines.append(PRICE_SENSITIVE_GUIDANCE)
    if personality.traits.detail_oriented > HIGHLIGHT_THRESHOLD:
        lines.append(DETAIL_ORIENTED_GUIDANCE)
    return "\n".join(lines) + "\n\n"


def compile_prompt(
    module: SalesModule, personality: Optional[CustomerPersonality] = None
) -> str:
    training = module.training_data
    if training is None:
        return DefaultSystemPrompt.CONTENT

    prompt = f'Bạn là một nhân viên bán hàng chuyên nghiệp cho sản phẩm "{module.name}".\n\n'
    if training.product_info is not None:
        prompt += _product_block(training.product_info)
    if training.communication_style is not None:
        prompt += _style_block(training.communication_style)
    if training.sales_flow:
        prompt += _sales_flow_block(training.sales_flow)
    if training.common_questions:
        prompt += _faq_block(training.common_questions)
    if personality is not None:
        prompt += _customer_block(personality)
    return prompt + CLOSING_RULES
