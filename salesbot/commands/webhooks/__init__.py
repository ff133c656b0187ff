from salesbot.commands.webhooks.messenger_command import MessengerWebhookCommand
from salesbot.commands.webhooks.telegram_command import TelegramWebhookCommand

__all__ = ["MessengerWebhookCommand", "TelegramWebhookCommand"]
