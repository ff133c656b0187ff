from salesbot.stores.base import ConversationStore, ModuleStore
from salesbot.stores.conversation_store import SQLConversationStore
from salesbot.stores.module_store import SQLModuleStore

__all__ = [
    "ConversationStore",
    "ModuleStore",
    "SQLConversationStore",
    "SQLModuleStore",
]
