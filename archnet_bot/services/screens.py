from __future__ import annotations

import logging
import os
from html import escape

from aiogram.exceptions import TelegramAPIError
from aiogram.types import FSInputFile, Message

from archnet_bot.config import Config
from archnet_bot.keyboards.menu import join_channel_keyboard, language_keyboard, main_menu_keyboard
from archnet_bot.texts.catalog import TEXTS, TextCatalog

logger = logging.getLogger(__name__)


def channel_url(channel: str) -> str:
    return f"https://t.me/{channel.strip().lstrip('@')}"


class Screens:
    """Screens shared by several routers: welcome, language picker, join prompt."""

    def __init__(self, config: Config, texts: TextCatalog = TEXTS) -> None:
        self._config = config
        self._texts = texts

    def welcome_text(self, language: str) -> str:
        return self._texts.get("welcome", language, bot_name=escape(self._config.bot_name(language)))

    async def send_welcome(self, message: Message, language: str) -> None:
        text = self.welcome_text(language)
        keyboard = main_menu_keyboard(language)
        path = self._config.welcome_image
        if path and os.path.isfile(path):
            try:
                await message.answer_photo(FSInputFile(path), caption=text, reply_markup=keyboard)
                return
            except TelegramAPIError as exc:
                logger.warning("welcome photo failed, sending text instead: %s", exc)
        await message.answer(text, reply_markup=keyboard)

    async def send_language_selection(self, message: Message, language: str) -> None:
        await message.answer(self._texts.get("choose_language", language), reply_markup=language_keyboard())

    async def send_join_prompt(self, message: Message, language: str) -> None:
        await message.answer(
            self._texts.get("join_channel_required", language),
            reply_markup=join_channel_keyboard(language, channel_url(self._config.required_channel)),
        )
