"""
Message orchestrator: turns one inbound customer message into one reply.

A conversation moves NEW -> INTRO_SENT -> STEADY. The first message of a
conversation is answered with an intro built from the module's product data
(no generation backend involved). Later messages go through memory, prompt
compilation, media selection and the provider gateway. Once the user turn is
stored, any failure becomes a fixed apology; the user turn is kept.
"""

from __future__ import annotations

from typing import Optional

from salesbot.constants.replies import (
    APOLOGY_TEXT,
    EMPTY_REPLY_TEXT,
    GENERIC_INTRO_TEMPLATE,
    INTRO_TEMPLATE,
    NOT_CONFIGURED_TEXT,
)
from salesbot.core.locks import KeyedLock
from salesbot.exceptions import NotFoundError
from salesbot.infra.error_reporting import report_exception
from salesbot.infra.logging_config import get_logger
from salesbot.providers.gateway import ProviderGateway
from salesbot.schemas.conversation import Attachment, ChatResponse, Conversation
from salesbot.schemas.module import MediaItem, ProductInfo, SalesModule
from salesbot.services.conversation_manager import ConversationManager
from salesbot.services.media_matcher import select_for_message
from salesbot.services.memory_compiler import compile_memory, to_history
from salesbot.services.prompt_compiler import compile_prompt, format_price
from salesbot.stores.base import ModuleStore

logger = get_logger("orchestrator")


def intro_product(module: SalesModule) -> Optional[ProductInfo]:
    """Product the intro presents: training product info, else the first catalog product."""
    if module.training_data is not None and module.training_data.product_info:
        return module.training_data.product_info
    if module.products:
        product = module.products[0]
        return ProductInfo(
            name=product.name,
            description=product.description or "",
            price=product.price,
            currency=product.currency,
        )
    return None


def build_intro_text(module: SalesModule) -> str:
    product = intro_product(module)
    if product is None:
        return GENERIC_INTRO_TEMPLATE.format(name=module.name)
    return INTRO_TEMPLATE.format(
        name=product.name,
        description=product.description or "",
        price=format_price(product.price),
        currency=product.currency,
    )


def _attachments(items: list[MediaItem]) -> list[Attachment]:
    return [Attachment(kind=item.kind, url=item.url) for item in items]


class MessageOrchestrator:
    def __init__(
        self,
        modules: ModuleStore,
        conversations: ConversationManager,
        gateway: ProviderGateway,
        immediate_context_size: int = 10,
        intro_media_limit: int = 5,
        reply_media_limit: int = 3,
        locks: Optional[KeyedLock] = None,
    ) -> None:
        self._modules = modules
        self._conversations = conversations
        self._gateway = gateway
        self._immediate_context_size = immediate_context_size
        self._intro_media_limit = intro_media_limit
        self._reply_media_limit = reply_media_limit
        self._locks = locks or KeyedLock()

    async def handle_message(
        self,
        module_id: str,
        sender_id: str,
        text: str,
        customer_name: Optional[str] = None,
    ) -> ChatResponse:
        """
        Handle one inbound message for (module, sender).

        Raises:
            NotFoundError: unknown module.
            PersistenceError: the conversation or the user turn could not be stored.
        """
        module = await self._modules.get(module_id)
        if module is None:
            raise NotFoundError("Module", module_id)

        async with self._locks.hold((module_id, sender_id)):
            conversation = await self._conversations.get_or_create(
                module_id, sender_id, customer_name
            )
            await self._conversations.add_message(conversation.id, "user", text)
            try:
                return await self._respond(module, conversation.id, text)
            except Exception as e:
                report_exception(
                    e,
                    module_id=module_id,
                    conversation_id=conversation.id,
                    customer_id=sender_id,
                )
                return ChatResponse(text=APOLOGY_TEXT, media=[])

    async def _respond(
        self, module: SalesModule, conversation_id: str, text: str
    ) -> ChatResponse:
        conversation = await self._conversations.get(conversation_id)
        if conversation is None:
            raise NotFoundError("Conversation", conversation_id)

        if len(conversation.messages) == 1:
            return await self._send_intro(module, conversation)

        if module.training_data is None:
            logger.warning("Module %s has no training data", module.id)
            return ChatResponse(text=NOT_CONFIGURED_TEXT, media=[])

        memory = compile_memory(conversation, self._immediate_context_size)
        system_prompt = compile_prompt(module, conversation.personality)
        media = select_for_message(module.media, text, self._reply_media_limit)
        result = await self._gateway.send(
            module.ai_provider, system_prompt, to_history(memory)
        )
        reply = result.content or EMPTY_REPLY_TEXT
        await self._conversations.add_message(
            conversation.id,
            "assistant",
            reply,
            attachments=_attachments(media),
            generation=result.metadata,
        )
        logger.info(
            "Replied in conversation %s via %s (%d media)",
            conversation.id,
            result.metadata.provider,
            len(media),
        )
        return ChatResponse(text=reply, media=[item.url for item in media])

    async def _send_intro(
        self, module: SalesModule, conversation: Conversation
    ) -> ChatResponse:
        media = module.media[: self._intro_media_limit]
        intro = build_intro_text(module)
        await self._conversations.add_message(
            conversation.id, "assistant", intro, attachments=_attachments(media)
        )
        logger.info("Sent intro in conversation %s", conversation.id)
        return ChatResponse(text=intro, media=[item.url for item in media])
