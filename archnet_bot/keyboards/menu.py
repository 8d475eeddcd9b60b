from __future__ import annotations

from typing import List

from aiogram.types import InlineKeyboardMarkup, KeyboardButton, ReplyKeyboardMarkup

from archnet_bot.keyboards.inline import build_rows, callback_button, url_button
from archnet_bot.services import callbacks
from archnet_bot.texts.catalog import TEXTS

LANGUAGE_LABELS = (
    ("fa", "🇮🇷 فارسی"),
    ("en", "🇬🇧 English"),
    ("ru", "🇷🇺 Русский"),
    ("zh", "🇨🇳 中文"),
)

# label keys of the reply keyboard, row by row
MAIN_MENU_LAYOUT = (
    ("btn_my_services", "btn_buy_service"),
    ("btn_balance", "btn_invitation"),
    ("btn_prices", "btn_support"),
    ("btn_settings",),
)


def _button(text: str) -> KeyboardButton:
    return KeyboardButton(text=text)


def main_menu_keyboard(language: str) -> ReplyKeyboardMarkup:
    rows: List[List[KeyboardButton]] = [
        [_button(TEXTS.button(key, language)) for key in row] for row in MAIN_MENU_LAYOUT
    ]
    return ReplyKeyboardMarkup(keyboard=rows, resize_keyboard=True)


def language_keyboard() -> InlineKeyboardMarkup:
    buttons = [callback_button(label, callbacks.lang_select(code)) for code, label in LANGUAGE_LABELS]
    return InlineKeyboardMarkup(inline_keyboard=build_rows(buttons, width=2))


def settings_keyboard(language: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [callback_button(TEXTS.button("btn_change_language", language), callbacks.settings_language())],
            [callback_button(TEXTS.button("btn_back", language), callbacks.menu_back())],
        ]
    )


def join_channel_keyboard(language: str, url: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[[url_button(TEXTS.button("join_channel_button", language), url)]]
    )
