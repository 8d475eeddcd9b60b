"""Purchase wizard state machine.

``transition`` is pure: given the stored state and an event decoded from a
callback it returns the next state and the effects the executor in
``services.wizard`` has to carry out. Nothing here talks to Telegram or the
backend, so every path is testable with plain values.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import ClassVar, List, Optional, Sequence, Tuple, Union

from archnet_bot.models.api import DiscountTier, Plan
from archnet_bot.models.wizard import WizardState
from archnet_bot.states.purchase import WizardStep


# events


@dataclass(frozen=True, slots=True)
class BrowsePlans:
    page: int = 0


@dataclass(frozen=True, slots=True)
class LeavePlans:
    pass


@dataclass(frozen=True, slots=True)
class PickPlan:
    plan_id: int


@dataclass(frozen=True, slots=True)
class PlanLoaded:
    plan: Plan


@dataclass(frozen=True, slots=True)
class ChooseQuantity:
    quantity: int


@dataclass(frozen=True, slots=True)
class BackToPlans:
    pass


@dataclass(frozen=True, slots=True)
class ChoosePayment:
    payment_id: int
    payment_name: str


@dataclass(frozen=True, slots=True)
class BackToQuantity:
    pass


@dataclass(frozen=True, slots=True)
class BackToPayments:
    pass


@dataclass(frozen=True, slots=True)
class ConfirmOrder:
    pass


@dataclass(frozen=True, slots=True)
class CancelOrder:
    pass


WizardEvent = Union[
    BrowsePlans,
    LeavePlans,
    PickPlan,
    PlanLoaded,
    ChooseQuantity,
    BackToPlans,
    ChoosePayment,
    BackToQuantity,
    BackToPayments,
    ConfirmOrder,
    CancelOrder,
]


# effects


@dataclass(frozen=True, slots=True)
class ShowPlans:
    error_key: ClassVar[str] = "error_loading_plans"
    page: int = 0


@dataclass(frozen=True, slots=True)
class RecoverToPlans:
    error_key: ClassVar[str] = "error_loading_plans"
    reason: str = ""


@dataclass(frozen=True, slots=True)
class ShowMainMenu:
    error_key: ClassVar[str] = "generic_error"


@dataclass(frozen=True, slots=True)
class LoadPlan:
    error_key: ClassVar[str] = "error_loading_plans"
    plan_id: int = 0


@dataclass(frozen=True, slots=True)
class ShowQuantities:
    error_key: ClassVar[str] = "generic_error"
    plan_name: str = ""
    options: Tuple[DiscountTier, ...] = ()


@dataclass(frozen=True, slots=True)
class ShowPayments:
    error_key: ClassVar[str] = "error_loading_payments"
    plan_name: str = ""
    quantity: int = 0


@dataclass(frozen=True, slots=True)
class ShowConfirmation:
    error_key: ClassVar[str] = "generic_error"
    state: Optional[WizardState] = None


@dataclass(frozen=True, slots=True)
class PlaceOrder:
    error_key: ClassVar[str] = "error_creating_order"
    state: Optional[WizardState] = None


@dataclass(frozen=True, slots=True)
class ShowCancelled:
    error_key: ClassVar[str] = "generic_error"


Effect = Union[
    ShowPlans,
    RecoverToPlans,
    ShowMainMenu,
    LoadPlan,
    ShowQuantities,
    ShowPayments,
    ShowConfirmation,
    PlaceOrder,
    ShowCancelled,
]


@dataclass(frozen=True, slots=True)
class Transition:
    state: Optional[WizardState]
    effects: Tuple[Effect, ...] = ()


def build_quantity_options(tiers: Sequence[DiscountTier]) -> List[DiscountTier]:
    """Quantity 1 at 0% first, then every backend tier except quantity 1, in backend order."""
    options = [DiscountTier(quantity=1, discount=0)]
    options.extend(tier for tier in tiers if tier.quantity != 1)
    return options


def clamp_page(page: int, total: int) -> int:
    if total <= 0:
        return 0
    return max(0, min(page, total - 1))


def _quantities(state: WizardState) -> ShowQuantities:
    return ShowQuantities(
        plan_name=state.plan_name,
        options=tuple(build_quantity_options(state.discounts)),
    )


def _recover(state: Optional[WizardState], reason: str) -> Transition:
    return Transition(state, (RecoverToPlans(reason=reason),))


def transition(state: Optional[WizardState], event: WizardEvent) -> Transition:
    if isinstance(event, BrowsePlans):
        return Transition(state, (ShowPlans(page=max(event.page, 0)),))

    if isinstance(event, LeavePlans):
        return Transition(state, (ShowMainMenu(),))

    if isinstance(event, PickPlan):
        return Transition(state, (LoadPlan(plan_id=event.plan_id),))

    if isinstance(event, PlanLoaded):
        fresh = WizardState.from_plan(event.plan)
        return Transition(fresh, (_quantities(fresh),))

    if isinstance(event, BackToPlans):
        return Transition(state, (ShowPlans(page=0),))

    if isinstance(event, CancelOrder):
        return Transition(None, (ShowCancelled(),))

    if state is None:
        return _recover(None, f"no purchase state for {type(event).__name__}")

    if isinstance(event, ChooseQuantity):
        allowed = {option.quantity for option in build_quantity_options(state.discounts)}
        if event.quantity not in allowed:
            return Transition(state, (_quantities(state),))
        updated = replace(
            state,
            quantity=event.quantity,
            payment_id=None,
            payment_name="",
            step=WizardStep.SELECTING_PAYMENT,
        )
        return Transition(updated, (ShowPayments(plan_name=updated.plan_name, quantity=event.quantity),))

    if isinstance(event, BackToQuantity):
        updated = replace(state, step=WizardStep.SELECTING_QUANTITY)
        return Transition(updated, (_quantities(updated),))

    if state.quantity is None:
        return Transition(replace(state, step=WizardStep.SELECTING_QUANTITY), (_quantities(state),))

    if isinstance(event, ChoosePayment):
        updated = replace(
            state,
            payment_id=event.payment_id,
            payment_name=event.payment_name,
            step=WizardStep.CONFIRMING_ORDER,
        )
        return Transition(updated, (ShowConfirmation(state=updated),))

    if isinstance(event, BackToPayments):
        updated = replace(state, step=WizardStep.SELECTING_PAYMENT)
        return Transition(updated, (ShowPayments(plan_name=updated.plan_name, quantity=state.quantity),))

    if isinstance(event, ConfirmOrder):
        if not state.ready_to_order:
            updated = replace(state, step=WizardStep.SELECTING_PAYMENT)
            return Transition(updated, (ShowPayments(plan_name=state.plan_name, quantity=state.quantity),))
        # the state leaves the store before the order exists
        return Transition(None, (PlaceOrder(state=replace(state, step=WizardStep.COMPLETING)),))

    raise TypeError(f"unsupported wizard event: {event!r}")
