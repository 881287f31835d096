"""
Telegram notifier built on aiogram 3.

Отправка текстового сообщения одному получателю через Bot API.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from aiogram import Bot
from aiogram.client.session.aiohttp import AiohttpSession
from aiogram.client.telegram import TelegramAPIServer
from aiogram.exceptions import TelegramAPIError

from .config import TelegramConfig

logger = logging.getLogger(__name__)


class NotifyError(Exception):
    """Message could not be delivered."""


class TelegramNotifier:
    """Deliver text messages to a fixed chat."""

    def __init__(self, config: TelegramConfig, timeout: float = 10.0, bot: Optional[Bot] = None) -> None:
        self.chat_id = config.chat_id
        if bot is None:
            session = AiohttpSession(
                api=TelegramAPIServer.from_base(config.api_base),
                timeout=timeout,
            )
            bot = Bot(config.bot_token, session=session)
        self.bot = bot

    async def notify(self, text: str) -> None:
        """
        Send ``text`` once; no internal retry.

        Raises NotifyError on network failure or a non-success Bot API reply.
        """
        try:
            await self.bot.send_message(chat_id=self.chat_id, text=text)
        except TelegramAPIError as exc:
            raise NotifyError(f"sendMessage to {self.chat_id} failed: {exc}") from exc
        except asyncio.TimeoutError as exc:
            raise NotifyError(f"sendMessage to {self.chat_id} timed out") from exc
        logger.info("Sent notification to %s: %s", self.chat_id, text)

    async def close(self) -> None:
        await self.bot.session.close()


__all__ = ["NotifyError", "TelegramNotifier"]
