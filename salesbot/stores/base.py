"""
Store interfaces consumed by the conversation pipeline.

Every read returns a fresh copy; every write fully replaces the stored value.
No caller holds a live reference to stored state.
"""

from __future__ import annotations

from typing import Optional, Protocol

from salesbot.schemas.conversation import Conversation
from salesbot.schemas.module import SalesModule


class ModuleStore(Protocol):
    async def get(self, module_id: str) -> Optional[SalesModule]: ...

    async def get_all(self) -> list[SalesModule]: ...

    async def save(self, module: SalesModule) -> None: ...

    async def delete(self, module_id: str) -> None: ...


class ConversationStore(Protocol):
    async def get(self, conversation_id: str) -> Optional[Conversation]: ...

    async def get_all_for_module(self, module_id: str) -> list[Conversation]: ...

    async def save(self, conversation: Conversation) -> None: ...
