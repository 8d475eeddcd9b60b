from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, replace
from html import escape
from typing import Deque, List, Optional

from aiogram.exceptions import TelegramBadRequest
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message

from archnet_bot.api.client import BackendClient, BackendError
from archnet_bot.api.codes import OrderStatus
from archnet_bot.keyboards.purchase import (
    confirmation_keyboard,
    pay_now_keyboard,
    payment_keyboard,
    plan_page_keyboard,
    quantity_keyboard,
)
from archnet_bot.models.api import Checkout, OrderDetail, Plan
from archnet_bot.models.wizard import WizardState, WizardStore
from archnet_bot.services.auth import AuthError, SessionExpiredError, SessionManager, TelegramIdentity
from archnet_bot.services.callbacks import decode_wizard_event
from archnet_bot.services.formatting import format_bytes
from archnet_bot.services.locks import KeyedLocks
from archnet_bot.services.logs import for_user
from archnet_bot.services.purchase import (
    BrowsePlans,
    Effect,
    LoadPlan,
    PlaceOrder,
    PlanLoaded,
    RecoverToPlans,
    ShowCancelled,
    ShowConfirmation,
    ShowMainMenu,
    ShowPayments,
    ShowPlans,
    ShowQuantities,
    WizardEvent,
    clamp_page,
    transition,
)
from archnet_bot.services.screens import Screens
from archnet_bot.states.purchase import WizardStep
from archnet_bot.texts.catalog import TEXTS, TextCatalog

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Screen:
    """The chat message a wizard step renders into."""

    message: Message
    edit: bool = True

    async def show(self, text: str, markup: Optional[InlineKeyboardMarkup] = None) -> None:
        if self.edit:
            try:
                await self.message.edit_text(text, reply_markup=markup)
                return
            except TelegramBadRequest as exc:
                if "message is not modified" in str(exc):
                    return
                logger.warning("edit failed, sending a new message: %s", exc)
        await self.message.answer(text, reply_markup=markup)


@dataclass(slots=True)
class _Context:
    screen: Screen
    identity: TelegramIdentity
    language: str


class PurchaseWizard:
    """Runs wizard transitions for one user at a time and performs their effects."""

    def __init__(
        self,
        api: BackendClient,
        sessions: SessionManager,
        store: WizardStore,
        screens: Screens,
        texts: TextCatalog = TEXTS,
    ) -> None:
        self._api = api
        self._sessions = sessions
        self._store = store
        self._screens = screens
        self._texts = texts
        self._locks = KeyedLocks()

    async def open_catalog(self, message: Message, identity: TelegramIdentity, language: str) -> None:
        await self.dispatch(Screen(message, edit=False), identity, language, BrowsePlans(page=0))

    async def handle_callback(self, callback: CallbackQuery, identity: TelegramIdentity, language: str) -> None:
        event = decode_wizard_event(callback.data)
        if event is None:
            for_user(logger, identity.id).debug("ignoring callback %r", callback.data)
            return
        await self.dispatch(Screen(callback.message), identity, language, event)

    async def dispatch(
        self,
        screen: Screen,
        identity: TelegramIdentity,
        language: str,
        event: WizardEvent,
    ) -> None:
        ctx = _Context(screen=screen, identity=identity, language=language)
        pending: Deque[WizardEvent] = deque([event])
        async with self._locks.get(identity.id):
            while pending:
                current = await self._store.get(identity.id)
                result = transition(current, pending.popleft())
                if result.state is not current:
                    if result.state is None:
                        await self._store.delete(identity.id)
                    else:
                        await self._store.save(identity.id, result.state)
                for effect in result.effects:
                    follow_up = await self._run_effect(effect, ctx)
                    if follow_up is not None:
                        pending.append(follow_up)

    async def _run_effect(self, effect: Effect, ctx: _Context) -> Optional[WizardEvent]:
        log = for_user(logger, ctx.identity.id)
        try:
            return await self._apply(effect, ctx)
        except SessionExpiredError:
            log.warning("session expired during %s", type(effect).__name__)
            await ctx.screen.show(self._texts.get("session_expired", ctx.language))
        except AuthError as exc:
            log.error("authentication failed during %s: %s", type(effect).__name__, exc)
            await ctx.screen.show(self._texts.get("auth_error", ctx.language))
        except BackendError as exc:
            log.error("%s failed: %s", type(effect).__name__, exc)
            await ctx.screen.show(self._texts.get(effect.error_key, ctx.language))
        return None

    async def _apply(self, effect: Effect, ctx: _Context) -> Optional[WizardEvent]:
        if isinstance(effect, RecoverToPlans):
            for_user(logger, ctx.identity.id).warning("%s, back to the catalog", effect.reason)
            await self._show_plans(ctx, 0)
        elif isinstance(effect, ShowPlans):
            await self._show_plans(ctx, effect.page)
        elif isinstance(effect, ShowMainMenu):
            await self._show_main_menu(ctx)
        elif isinstance(effect, LoadPlan):
            return await self._load_plan(ctx, effect.plan_id)
        elif isinstance(effect, ShowQuantities):
            await ctx.screen.show(
                self._texts.get("select_quantity", ctx.language, plan_name=escape(effect.plan_name)),
                quantity_keyboard(effect.options, ctx.language),
            )
        elif isinstance(effect, ShowPayments):
            await self._show_payments(ctx, effect)
        elif isinstance(effect, ShowConfirmation):
            await self._show_confirmation(ctx, effect.state)
        elif isinstance(effect, PlaceOrder):
            await self._place_order(ctx, effect.state)
        elif isinstance(effect, ShowCancelled):
            await ctx.screen.show(self._texts.get("order_cancelled", ctx.language))
        return None

    async def _fetch_plans(self, ctx: _Context) -> List[Plan]:
        return await self._sessions.execute_with_auth(
            ctx.identity, lambda token: self._api.get_plans(token, ctx.language)
        )

    def _plan_text(self, plan: Plan, page: int, total: int, language: str) -> str:
        details = self._texts.get(
            "plan_details",
            language,
            name=escape(plan.name),
            price=plan.unit_price,
            traffic=format_bytes(plan.traffic) if plan.traffic > 0 else self._texts.get("unlimited", language),
            unit_time=escape(plan.unit_time),
            devices=plan.device_limit,
        )
        footer = self._texts.get("plan_page", language, current=page + 1, total=total)
        return f"{details}\n\n{footer}"

    async def _show_plans(self, ctx: _Context, page: int) -> None:
        plans = await self._fetch_plans(ctx)
        if not plans:
            await ctx.screen.show(self._texts.get("no_plans_available", ctx.language))
            return
        page = clamp_page(page, len(plans))
        plan = plans[page]
        await ctx.screen.show(
            self._plan_text(plan, page, len(plans), ctx.language),
            plan_page_keyboard(plan.id, page, len(plans), ctx.language),
        )

    async def _show_main_menu(self, ctx: _Context) -> None:
        message = ctx.screen.message
        if ctx.screen.edit:
            try:
                await message.delete()
            except TelegramBadRequest as exc:
                logger.debug("could not delete catalog message: %s", exc)
        await self._screens.send_welcome(message, ctx.language)

    async def _load_plan(self, ctx: _Context, plan_id: int) -> WizardEvent:
        plans = await self._fetch_plans(ctx)
        for plan in plans:
            if plan.id == plan_id:
                return PlanLoaded(plan=plan)
        for_user(logger, ctx.identity.id).warning("plan %s is no longer offered", plan_id)
        return BrowsePlans(page=0)

    async def _show_payments(self, ctx: _Context, effect: ShowPayments) -> None:
        methods = await self._sessions.execute_with_auth(ctx.identity, self._api.get_payment_methods)
        if not methods:
            await ctx.screen.show(self._texts.get("no_payment_methods", ctx.language))
            return
        await ctx.screen.show(
            self._texts.get(
                "select_payment",
                ctx.language,
                plan_name=escape(effect.plan_name),
                months=effect.quantity,
            ),
            payment_keyboard(methods, ctx.language),
        )

    async def _show_confirmation(self, ctx: _Context, state: WizardState) -> None:
        try:
            preview = await self._sessions.execute_with_auth(
                ctx.identity,
                lambda token: self._api.preview_order(token, state.plan_id, state.quantity, state.payment_id),
            )
            total = preview.amount
        except (BackendError, AuthError, SessionExpiredError) as exc:
            for_user(logger, ctx.identity.id).warning("price preview failed, using estimate: %s", exc)
            total = state.estimated_total
        await ctx.screen.show(
            self._texts.get(
                "confirm_order",
                ctx.language,
                plan_name=escape(state.plan_name),
                months=state.quantity,
                payment_name=escape(state.payment_name),
                total=total,
            ),
            confirmation_keyboard(ctx.language),
        )

    async def _restore(self, user_id: int, state: WizardState) -> None:
        if await self._store.get(user_id) is None:
            await self._store.save(user_id, replace(state, step=WizardStep.CONFIRMING_ORDER))

    async def _place_order(self, ctx: _Context, state: WizardState) -> None:
        log = for_user(logger, ctx.identity.id)
        try:
            order_no = await self._sessions.execute_with_auth(
                ctx.identity,
                lambda token: self._api.purchase(token, state.plan_id, state.quantity, state.payment_id),
            )
        except (BackendError, AuthError, SessionExpiredError):
            # nothing was bought; let the user confirm again
            await self._restore(ctx.identity.id, state)
            raise
        log.info("order %s created for plan %s x%s", order_no, state.plan_id, state.quantity)

        checkout: Optional[Checkout] = None
        try:
            checkout = await self._sessions.execute_with_auth(
                ctx.identity, lambda token: self._api.checkout(token, order_no)
            )
        except (BackendError, AuthError, SessionExpiredError) as exc:
            log.warning("checkout for %s failed: %s", order_no, exc)

        detail: Optional[OrderDetail] = None
        try:
            detail = await self._sessions.execute_with_auth(
                ctx.identity, lambda token: self._api.get_order_detail(token, order_no)
            )
        except (BackendError, AuthError, SessionExpiredError) as exc:
            log.warning("order detail for %s failed: %s", order_no, exc)

        order_ref = escape(order_no)
        if detail is not None and detail.status is OrderStatus.FINISHED:
            await ctx.screen.show(self._texts.get("order_created_balance", ctx.language, order_no=order_ref))
        elif checkout is not None and checkout.checkout_url:
            await ctx.screen.show(
                self._texts.get("order_created", ctx.language, order_no=order_ref),
                pay_now_keyboard(checkout.checkout_url, ctx.language),
            )
        else:
            await ctx.screen.show(self._texts.get("order_pending", ctx.language, order_no=order_ref))
