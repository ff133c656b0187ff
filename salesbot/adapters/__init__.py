from salesbot.adapters.base import BasePlatformAdapter
from salesbot.adapters.messenger import MessengerAdapter
from salesbot.adapters.telegram import TelegramAdapter

__all__ = [
    "BasePlatformAdapter",
    "MessengerAdapter",
    "TelegramAdapter",
]
