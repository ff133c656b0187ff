"""Default 8-step sales flow, used when training text declares no steps."""

from salesbot.schemas.module import SalesFlowStep

DEFAULT_SALES_FLOW: tuple[tuple[str, str], ...] = (
    ("Chào hỏi", "Chào hỏi khách hàng một cách thân thiện"),
    ("Tìm hiểu nhu cầu", "Hỏi khách hàng về nhu cầu và sở thích"),
    ("Giới thiệu sản phẩm", "Giới thiệu sản phẩm phù hợp"),
    ("Trả lời câu hỏi", "Trả lời các câu hỏi của khách hàng"),
    ("Xử lý phản đối", "Xử lý các phản đối và lo ngại"),
    ("Tạo động lực mua", "Tạo động lực và sự cấp thiết"),
    ("Đề xuất đặt hàng", "Đề xuất khách hàng đặt hàng"),
    ("Hoàn tất đơn hàng", "Hướng dẫn hoàn tất đơn hàng"),
)


def default_sales_flow() -> list[SalesFlowStep]:
    return [
        SalesFlowStep(step=index, name=name, description=description)
        for index, (name, description) in enumerate(DEFAULT_SALES_FLOW, start=1)
    ]
