from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import sessionmaker

from salesbot.config import Settings, get_settings
from salesbot.core.orchestrator import MessageOrchestrator
from salesbot.core.registry import BackendRegistry
from salesbot.providers.gateway import ProviderGateway, build_default_registry
from salesbot.services.conversation_manager import ConversationManager
from salesbot.services.memory_compiler import MemoryCompiler
from salesbot.stores.base import ConversationStore, ModuleStore
from salesbot.stores.conversation_store import SQLConversationStore
from salesbot.stores.module_store import SQLModuleStore


class AppState:
    """Wires stores, services, gateway and orchestrator for one application instance."""

    def __init__(
        self,
        modules: ModuleStore,
        conversations: ConversationStore,
        registry: Optional[BackendRegistry] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.modules = modules
        self.conversation_store = conversations
        self.conversations = ConversationManager(
            conversations,
            window=self.settings.conversation_window,
        )
        self.memory = MemoryCompiler(conversations)
        self.gateway = ProviderGateway(
            registry if registry is not None else build_default_registry(self.settings)
        )
        self.orchestrator = MessageOrchestrator(
            modules,
            self.conversations,
            self.gateway,
            immediate_context_size=self.settings.immediate_context_size,
            intro_media_limit=self.settings.intro_media_limit,
            reply_media_limit=self.settings.reply_media_limit,
        )

    @classmethod
    def from_session_factory(
        cls,
        session_factory: sessionmaker,
        registry: Optional[BackendRegistry] = None,
        settings: Optional[Settings] = None,
    ) -> "AppState":
        return cls(
            SQLModuleStore(session_factory),
            SQLConversationStore(session_factory),
            registry=registry,
            settings=settings,
        )
