from __future__ import annotations

import logging
from html import escape
from typing import Awaitable, Callable, Dict, Optional, TypeVar

from aiogram import Bot, F, Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command, CommandStart
from aiogram.types import CallbackQuery, Message

from archnet_bot.api.client import BackendClient, BackendError
from archnet_bot.config import SUPPORTED_LANGUAGES, Config
from archnet_bot.keyboards.menu import settings_keyboard
from archnet_bot.middlewares.gates import AuthGate, ChannelGate, apply_gates
from archnet_bot.models.api import AffiliateCount
from archnet_bot.services import callbacks
from archnet_bot.services.auth import AuthError, SessionExpiredError, SessionManager, TelegramIdentity
from archnet_bot.services.formatting import format_subscriptions
from archnet_bot.services.logs import for_user
from archnet_bot.services.screens import Screens
from archnet_bot.services.wizard import PurchaseWizard
from archnet_bot.texts.catalog import TEXTS

logger = logging.getLogger(__name__)

T = TypeVar("T")
MenuAction = Callable[[Message, TelegramIdentity, str], Awaitable[None]]


def get_public_router(
    config: Config,
    api: BackendClient,
    sessions: SessionManager,
    wizard: PurchaseWizard,
    screens: Screens,
) -> Router:
    router = Router(name="public")
    entry_router = Router(name="public-entry")
    member_router = Router(name="public-members")
    for sub in (entry_router, member_router):
        sub.message.filter(F.chat.type == "private")
    router.include_router(entry_router)
    router.include_router(member_router)

    entry_router.callback_query.middleware(AuthGate(sessions, default_language=config.default_language))
    apply_gates(
        member_router,
        sessions,
        screens,
        channel=config.required_channel,
        default_language=config.default_language,
    )
    channel_gate = ChannelGate(config.required_channel, sessions, screens)

    async def call_backend(
        message: Message,
        identity: TelegramIdentity,
        language: str,
        action: Callable[[str], Awaitable[T]],
        error_key: str,
    ) -> Optional[T]:
        log = for_user(logger, identity.id)
        try:
            return await sessions.execute_with_auth(identity, action)
        except SessionExpiredError:
            log.warning("session expired")
            await message.answer(TEXTS.get("session_expired", language))
        except AuthError as exc:
            log.error("authentication failed: %s", exc)
            await message.answer(TEXTS.get("auth_error", language))
        except BackendError as exc:
            log.error("backend call failed: %s", exc)
            await message.answer(TEXTS.get(error_key, language))
        return None

    # entry: /start and the language picker

    @entry_router.message(CommandStart())
    async def start(message: Message, bot: Bot) -> None:
        identity = TelegramIdentity.from_user(message.from_user)
        try:
            await sessions.ensure_authenticated(identity)
        except AuthError as exc:
            for_user(logger, identity.id).error("authentication failed: %s", exc)
            await message.answer(TEXTS.get("auth_error", identity.language_code or config.default_language))
            return
        language = await sessions.get_cached_language(identity.id)
        if not language:
            await screens.send_language_selection(message, identity.language_code or config.default_language)
            return
        if not await channel_gate.allows(bot, identity.id):
            await screens.send_join_prompt(message, language)
            return
        await screens.send_welcome(message, language)

    @entry_router.callback_query(F.data.startswith(f"{callbacks.LANG}:"))
    async def language_chosen(callback: CallbackQuery) -> None:
        parsed = callbacks.unpack(callback.data)
        code = parsed.action if parsed else ""
        if code not in SUPPORTED_LANGUAGES:
            await callback.answer()
            return
        identity = TelegramIdentity.from_user(callback.from_user)
        log = for_user(logger, identity.id)
        try:
            await sessions.execute_with_auth(identity, lambda token: api.update_language(token, code))
        except SessionExpiredError:
            await callback.answer(TEXTS.get("session_expired", code), show_alert=True)
            return
        except (AuthError, BackendError) as exc:
            log.error("saving language %s failed: %s", code, exc)
            await callback.answer(TEXTS.get("save_failed", code), show_alert=True)
            return
        await sessions.set_language(identity.id, code)
        log.info("language set to %s", code)
        await callback.answer()
        if callback.message is None:
            return
        try:
            await callback.message.delete()
        except TelegramBadRequest as exc:
            log.debug("could not delete language picker: %s", exc)
        await screens.send_welcome(callback.message, code)

    # members: everything behind the auth and channel gates

    async def show_services(message: Message, identity: TelegramIdentity, language: str) -> None:
        subscriptions = await call_backend(
            message, identity, language, api.get_subscriptions, "error_loading_subscriptions"
        )
        if subscriptions is not None:
            await message.answer(format_subscriptions(subscriptions, language))

    async def show_catalog(message: Message, identity: TelegramIdentity, language: str) -> None:
        await wizard.open_catalog(message, identity, language)

    async def show_balance(message: Message, identity: TelegramIdentity, language: str) -> None:
        info = await call_backend(message, identity, language, api.get_user_info, "error_loading_user")
        if info is not None:
            await message.answer(TEXTS.get("balance_info", language, balance=info.balance))

    async def show_invitation(message: Message, identity: TelegramIdentity, language: str) -> None:
        info = await call_backend(message, identity, language, api.get_user_info, "error_loading_user")
        if info is None:
            return
        try:
            affiliate = await sessions.execute_with_auth(identity, api.get_affiliate_count)
        except (AuthError, SessionExpiredError, BackendError) as exc:
            for_user(logger, identity.id).warning("affiliate stats unavailable: %s", exc)
            affiliate = AffiliateCount()
        await message.answer(
            TEXTS.get(
                "invite_info",
                language,
                refer_code=escape(info.refer_code or "-"),
                registers=affiliate.registers,
                commission=affiliate.total_commission,
            )
        )

    async def show_support(message: Message, identity: TelegramIdentity, language: str) -> None:
        await message.answer(TEXTS.get("support_info", language))

    async def show_settings(message: Message, identity: TelegramIdentity, language: str) -> None:
        await message.answer(TEXTS.get("settings_menu", language), reply_markup=settings_keyboard(language))

    menu_actions: Dict[str, MenuAction] = {
        "btn_my_services": show_services,
        "btn_buy_service": show_catalog,
        "btn_balance": show_balance,
        "btn_invitation": show_invitation,
        "btn_prices": show_catalog,
        "btn_support": show_support,
        "btn_settings": show_settings,
    }

    @member_router.message(Command("status"))
    async def status(message: Message) -> None:
        identity = TelegramIdentity.from_user(message.from_user)
        language = await sessions.resolve_language(identity)
        await show_services(message, identity, language)

    @member_router.message(Command("lang"))
    async def change_language(message: Message) -> None:
        identity = TelegramIdentity.from_user(message.from_user)
        language = await sessions.resolve_language(identity)
        await screens.send_language_selection(message, language)

    @member_router.callback_query(F.data == callbacks.menu_back())
    async def menu_back(callback: CallbackQuery) -> None:
        await callback.answer()
        identity = TelegramIdentity.from_user(callback.from_user)
        language = await sessions.resolve_language(identity)
        if callback.message is not None:
            await screens.send_welcome(callback.message, language)

    @member_router.callback_query(F.data == callbacks.settings_language())
    async def settings_language(callback: CallbackQuery) -> None:
        await callback.answer()
        identity = TelegramIdentity.from_user(callback.from_user)
        language = await sessions.resolve_language(identity)
        if callback.message is not None:
            await screens.send_language_selection(callback.message, language)

    @member_router.callback_query(F.data.startswith((f"{callbacks.MENU}:", f"{callbacks.SETTINGS}:")))
    async def stale_menu_button(callback: CallbackQuery) -> None:
        for_user(logger, callback.from_user.id).debug("ignoring callback %r", callback.data)
        await callback.answer()

    @member_router.message(F.text)
    async def fallback(message: Message) -> None:
        identity = TelegramIdentity.from_user(message.from_user)
        language = await sessions.resolve_language(identity)
        text = (message.text or "").strip()
        for key, action in menu_actions.items():
            if text == TEXTS.button(key, language):
                await action(message, identity, language)
                return
        await message.answer(TEXTS.get("unknown_command", language))

    return router
