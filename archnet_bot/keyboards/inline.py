from __future__ import annotations

from typing import Iterable, List

from aiogram.types import InlineKeyboardButton


def callback_button(text: str, data: str) -> InlineKeyboardButton:
    return InlineKeyboardButton(text=text, callback_data=data)


def url_button(text: str, url: str) -> InlineKeyboardButton:
    return InlineKeyboardButton(text=text, url=url)


def build_rows(buttons: Iterable[InlineKeyboardButton], width: int = 2) -> List[List[InlineKeyboardButton]]:
    row: List[InlineKeyboardButton] = []
    rows: List[List[InlineKeyboardButton]] = []
    for button in buttons:
        row.append(button)
        if len(row) >= width:
            rows.append(row)
            row = []
    if row:
        rows.append(row)
    return rows
