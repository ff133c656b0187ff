"""Tests for system prompt compilation."""

from salesbot.schemas.conversation import CustomerPersonality, Traits
from salesbot.schemas.module import SalesModule
from salesbot.services.personality_engine import default_personality
from salesbot.services.prompt_compiler import (
    CLOSING_RULES,
    compile_prompt,
    format_price,
)

DEFAULT_PROMPT = (
    "Bạn là một nhân viên bán hàng chuyên nghiệp. \n"
    "Hãy trả lời khách hàng một cách thân thiện, tự nhiên và chuyên nghiệp.\n"
    "Luôn gửi INTRO message đầy đủ thông tin sản phẩm ở đầu mỗi cuộc trò chuyện mới."
)


def test_untrained_module_gets_exact_default_prompt():
    module = SalesModule(id="m-1", name="Shop")
    first = compile_prompt(module)
    assert first == DEFAULT_PROMPT
    assert first.encode("utf-8") == DEFAULT_PROMPT.encode("utf-8")
    assert compile_prompt(module, default_personality()) == first


def test_format_price_uses_vietnamese_separators():
    assert format_price(450000) == "450.000"
    assert format_price(1500.5) == "1.500,5"
    assert format_price(0) == "0"


def test_compiled_prompt_sections_in_order(sales_module):
    prompt = compile_prompt(sales_module)
    assert prompt.startswith(
        f'Bạn là một nhân viên bán hàng chuyên nghiệp cho sản phẩm "{sales_module.name}".'
    )
    assert "Giá: 450.000 VND" in prompt
    assert "Các biến thể: Xanh, Đỏ" in prompt
    order = [
        "## THÔNG TIN SẢN PHẨM",
        "## PHONG CÁCH GIAO TIẾP",
        "## QUY TRÌNH BÁN HÀNG (8 BƯỚC)",
        "## CÂU HỎI THƯỜNG GẶP",
        "## QUY TẮC QUAN TRỌNG",
    ]
    positions = [prompt.index(heading) for heading in order]
    assert positions == sorted(positions)
    assert prompt.endswith(CLOSING_RULES)
    assert "## THÔNG TIN KHÁCH HÀNG" not in prompt


def test_sales_flow_is_sorted_by_step(sales_module):
    prompt = compile_prompt(sales_module)
    assert prompt.index("Bước 1: Chào hỏi") < prompt.index("Bước 2: Tư vấn")
    assert "  - Từ khóa chuyển bước: xin chào" in prompt


def test_customer_block_highlights_high_scores(sales_module):
    personality = CustomerPersonality(
        communication_style="direct",
        tone="curious",
        traits=Traits(price_sensitive=8, detail_oriented=9),
    )
    personality.priorities.price = 12
    prompt = compile_prompt(sales_module, personality)
    assert "- Phong cách giao tiếp: Trực tiếp" in prompt
    assert "- Tone: Tò mò" in prompt
    assert "- Ưu tiên: Giá cả" in prompt
    assert "- Đặc điểm: Chú ý chi tiết, Nhạy cảm về giá" in prompt
    assert "đi thẳng vào vấn đề" in prompt
    assert "Nhấn mạnh giá trị và ưu đãi" in prompt
    assert "Cung cấp thông tin đầy đủ và chính xác" in prompt


def test_default_personality_gets_neutral_profile(sales_module):
    prompt = compile_prompt(sales_module, default_personality())
    assert "- Ưu tiên: Chưa xác định" in prompt
    assert "- Đặc điểm: Bình thường" in prompt


def test_compile_is_deterministic(sales_module):
    personality = default_personality()
    assert compile_prompt(sales_module, personality) == compile_prompt(
        sales_module, personality
    )
