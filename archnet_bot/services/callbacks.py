"""Inline button payloads: ``{domain}:{action}[:{param}...]``, at most 64 bytes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from archnet_bot.services.purchase import (
    BackToPayments,
    BackToPlans,
    BackToQuantity,
    BrowsePlans,
    CancelOrder,
    ChoosePayment,
    ChooseQuantity,
    ConfirmOrder,
    LeavePlans,
    PickPlan,
    WizardEvent,
)

MAX_CALLBACK_BYTES = 64
SEPARATOR = ":"

LANG = "lang"
MENU = "menu"
SETTINGS = "settings"
PLAN = "plan"
QTY = "qty"
PAY = "pay"
ORDER = "order"

WIZARD_DOMAINS = (PLAN, QTY, PAY, ORDER)


@dataclass(frozen=True, slots=True)
class CallbackData:
    domain: str
    action: str
    params: Tuple[str, ...] = ()

    def int_param(self, index: int = 0) -> Optional[int]:
        try:
            return int(self.params[index])
        except (IndexError, ValueError):
            return None


def pack(domain: str, action: str, *params: object) -> str:
    data = SEPARATOR.join([domain, action, *(str(param) for param in params)])
    if len(data.encode("utf-8")) > MAX_CALLBACK_BYTES:
        raise ValueError(f"callback data exceeds {MAX_CALLBACK_BYTES} bytes: {data!r}")
    return data


def unpack(data: Optional[str]) -> Optional[CallbackData]:
    if not data:
        return None
    parts = data.split(SEPARATOR)
    if len(parts) < 2 or not parts[0] or not parts[1]:
        return None
    return CallbackData(domain=parts[0], action=parts[1], params=tuple(parts[2:]))


def _truncate_utf8(text: str, limit: int) -> str:
    encoded = text.encode("utf-8")
    if len(encoded) <= limit:
        return text
    return encoded[: max(limit, 0)].decode("utf-8", errors="ignore")


# builders


def lang_select(code: str) -> str:
    return pack(LANG, code)


def menu_back() -> str:
    return pack(MENU, "back")


def settings_language() -> str:
    return pack(SETTINGS, "lang")


def plan_page(page: int) -> str:
    return pack(PLAN, "page", page)


def plan_select(plan_id: int) -> str:
    return pack(PLAN, "select", plan_id)


def plan_back() -> str:
    return pack(PLAN, "back")


def qty_months(quantity: int) -> str:
    return pack(QTY, "months", quantity)


def qty_back() -> str:
    return pack(QTY, "back")


def pay_select(payment_id: int, name: str) -> str:
    prefix = f"{PAY}{SEPARATOR}select{SEPARATOR}{payment_id}{SEPARATOR}"
    # the name only labels the confirmation screen, so it may be cut short
    room = MAX_CALLBACK_BYTES - len(prefix.encode("utf-8"))
    return prefix + _truncate_utf8(name, room)


def pay_back() -> str:
    return pack(PAY, "back")


def order_confirm() -> str:
    return pack(ORDER, "confirm")


def order_back() -> str:
    return pack(ORDER, "back")


def order_cancel() -> str:
    return pack(ORDER, "cancel")


# decoding


def decode_wizard_event(data: Optional[str]) -> Optional[WizardEvent]:
    """Map a wizard button payload to its event; ``None`` for anything unrecognized."""
    parsed = unpack(data)
    if parsed is None:
        return None
    key = (parsed.domain, parsed.action)

    if key == (PLAN, "page"):
        page = parsed.int_param()
        return BrowsePlans(page=page) if page is not None else None
    if key == (PLAN, "select"):
        plan_id = parsed.int_param()
        return PickPlan(plan_id=plan_id) if plan_id is not None else None
    if key == (PLAN, "back"):
        return LeavePlans()
    if key == (QTY, "months"):
        quantity = parsed.int_param()
        return ChooseQuantity(quantity=quantity) if quantity is not None and quantity > 0 else None
    if key == (QTY, "back"):
        return BackToPlans()
    if key == (PAY, "select"):
        payment_id = parsed.int_param()
        if payment_id is None:
            return None
        return ChoosePayment(payment_id=payment_id, payment_name=SEPARATOR.join(parsed.params[1:]))
    if key == (PAY, "back"):
        return BackToQuantity()
    if key == (ORDER, "confirm"):
        return ConfirmOrder()
    if key == (ORDER, "back"):
        return BackToPayments()
    if key == (ORDER, "cancel"):
        return CancelOrder()
    return None
