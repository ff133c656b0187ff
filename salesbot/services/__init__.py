from salesbot.services.conversation_manager import ConversationManager
from salesbot.services.memory_compiler import MemoryCompiler

__all__ = [
    "ConversationManager",
    "MemoryCompiler",
]
