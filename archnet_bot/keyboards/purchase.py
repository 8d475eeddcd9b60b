from __future__ import annotations

from typing import List, Sequence

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from archnet_bot.keyboards.inline import build_rows, callback_button, url_button
from archnet_bot.models.api import DiscountTier, PaymentMethod
from archnet_bot.services import callbacks
from archnet_bot.texts.catalog import TEXTS


def quantity_label(option: DiscountTier, language: str) -> str:
    key = "btn_month" if option.quantity == 1 else "btn_months"
    label = TEXTS.get(key, language, months=option.quantity)
    if option.discount > 0:
        label = f"{label} (-{option.discount}%)"
    return label


def plan_page_keyboard(plan_id: int, page: int, total: int, language: str) -> InlineKeyboardMarkup:
    rows: List[List[InlineKeyboardButton]] = [
        [callback_button(TEXTS.button("btn_select_plan", language), callbacks.plan_select(plan_id))]
    ]
    navigation: List[InlineKeyboardButton] = []
    if page > 0:
        navigation.append(callback_button(TEXTS.button("btn_prev", language), callbacks.plan_page(page - 1)))
    if page < total - 1:
        navigation.append(callback_button(TEXTS.button("btn_next", language), callbacks.plan_page(page + 1)))
    if navigation:
        rows.append(navigation)
    rows.append([callback_button(TEXTS.button("btn_back", language), callbacks.plan_back())])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def quantity_keyboard(options: Sequence[DiscountTier], language: str) -> InlineKeyboardMarkup:
    buttons = [callback_button(quantity_label(option, language), callbacks.qty_months(option.quantity)) for option in options]
    rows = build_rows(buttons, width=2)
    rows.append([callback_button(TEXTS.button("btn_back", language), callbacks.qty_back())])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def payment_keyboard(methods: Sequence[PaymentMethod], language: str) -> InlineKeyboardMarkup:
    rows: List[List[InlineKeyboardButton]] = [
        [callback_button(method.name, callbacks.pay_select(method.id, method.name))] for method in methods
    ]
    rows.append([callback_button(TEXTS.button("btn_back", language), callbacks.pay_back())])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def confirmation_keyboard(language: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [callback_button(TEXTS.button("btn_confirm", language), callbacks.order_confirm())],
            [
                callback_button(TEXTS.button("btn_back", language), callbacks.order_back()),
                callback_button(TEXTS.button("btn_cancel", language), callbacks.order_cancel()),
            ],
        ]
    )


def pay_now_keyboard(url: str, language: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[[url_button(TEXTS.button("btn_pay_now", language), url)]])
