from salesbot.models.conversation import ConversationRecord
from salesbot.models.conversation_message import ConversationMessageRecord
from salesbot.models.sales_module import SalesModuleRecord

__all__ = [
    "ConversationMessageRecord",
    "ConversationRecord",
    "SalesModuleRecord",
]
