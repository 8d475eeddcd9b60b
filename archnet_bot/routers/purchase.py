from __future__ import annotations

from aiogram import F, Router
from aiogram.types import CallbackQuery, InaccessibleMessage

from archnet_bot.config import Config
from archnet_bot.middlewares.gates import apply_gates
from archnet_bot.services.auth import SessionManager, TelegramIdentity
from archnet_bot.services.callbacks import SEPARATOR, WIZARD_DOMAINS
from archnet_bot.services.screens import Screens
from archnet_bot.services.wizard import PurchaseWizard


def get_purchase_router(
    config: Config,
    sessions: SessionManager,
    wizard: PurchaseWizard,
    screens: Screens,
) -> Router:
    router = Router(name="purchase")
    apply_gates(
        router,
        sessions,
        screens,
        channel=config.required_channel,
        default_language=config.default_language,
    )
    prefixes = tuple(f"{domain}{SEPARATOR}" for domain in WIZARD_DOMAINS)

    @router.callback_query(F.data.startswith(prefixes))
    async def wizard_step(callback: CallbackQuery) -> None:
        # acknowledge first so the client never shows a spinner, even for stale buttons
        await callback.answer()
        if callback.message is None or isinstance(callback.message, InaccessibleMessage):
            return
        identity = TelegramIdentity.from_user(callback.from_user)
        language = await sessions.resolve_language(identity)
        await wizard.handle_callback(callback, identity, language)

    return router
