"""Fixed customer-facing texts."""

APOLOGY_TEXT = "Xin lỗi, đã xảy ra lỗi. Vui lòng thử lại sau."
NOT_CONFIGURED_TEXT = "Xin lỗi, hệ thống đang được cấu hình. Vui lòng thử lại sau."
EMPTY_REPLY_TEXT = "Xin lỗi, tôi không hiểu."

INTRO_TEMPLATE = (
    "Xin chào! 👋\n\n"
    "Tôi là trợ lý bán hàng của {name}.\n\n"
    "{description}\n\n"
    "Giá: {price} {currency}\n\n"
    "Bạn có muốn tìm hiểu thêm về sản phẩm không? 😊"
)

# Used when a module has neither training product info nor a catalog product
GENERIC_INTRO_TEMPLATE = (
    "Xin chào! 👋\n\n"
    "Tôi là trợ lý bán hàng của {name}.\n\n"
    "Bạn cần tư vấn về sản phẩm nào ạ? 😊"
)
