from __future__ import annotations

from enum import Enum


class WizardStep(str, Enum):
    IDLE = "idle"
    BROWSING_PLANS = "browsing_plans"
    SELECTING_QUANTITY = "selecting_quantity"
    SELECTING_PAYMENT = "selecting_payment"
    CONFIRMING_ORDER = "confirming_order"
    COMPLETING = "completing"
    CANCELLED = "cancelled"
