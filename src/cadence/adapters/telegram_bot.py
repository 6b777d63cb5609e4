"""Telegram adapter - customer notifications through a bot."""

import asyncio
import logging

from telegram import Bot
from telegram.error import TelegramError

logger = logging.getLogger(__name__)


class TelegramMessenger:
    """
    Telegram bot messenger.

    Implements Messenger protocol. The destination address is the chat id
    stored on the contact as telegram_chat_id.
    Delivery errors are logged and swallowed.
    """

    def __init__(self, token: str):
        self.token = token

    async def _send(self, chat_id: str, text: str) -> None:
        async with Bot(self.token) as bot:
            await bot.send_message(chat_id=chat_id, text=text)

    def send_proactive_message(self, destination: str, text: str, contact_id: str) -> None:
        """Send a message to a Telegram chat."""
        if not destination:
            logger.warning(f"No chat id for contact {contact_id}, message not sent")
            return

        try:
            asyncio.run(self._send(destination, text))
            logger.info(f"Sent Telegram message to contact {contact_id}")
        except TelegramError as e:
            logger.error(f"Failed to send Telegram message to contact {contact_id}: {e}")
