from __future__ import annotations

import asyncio
import logging
from functools import partial

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramAPIError
from aiogram.types import MenuButtonWebApp, WebAppInfo

from archnet_bot.api.client import BackendClient, BackendError
from archnet_bot.config import Config, load_config
from archnet_bot.models.db import MemorySessionStore, SessionStore, SQLiteSessionStore
from archnet_bot.models.wizard import MemoryWizardStore, SQLiteWizardStore, WizardStore
from archnet_bot.routers.admin import get_admin_router
from archnet_bot.routers.public import get_public_router
from archnet_bot.routers.purchase import get_purchase_router
from archnet_bot.services.auth import SessionManager, TelegramAuthClient, fetch_photo_url
from archnet_bot.services.logs import setup_logging
from archnet_bot.services.screens import Screens
from archnet_bot.services.security import TokenCipher
from archnet_bot.services.wizard import PurchaseWizard

logger = logging.getLogger("archnet_bot")


def build_dispatcher(
    config: Config,
    api: BackendClient,
    sessions: SessionManager,
    wizard_store: WizardStore,
) -> Dispatcher:
    screens = Screens(config)
    wizard = PurchaseWizard(api, sessions, wizard_store, screens)
    dp = Dispatcher()
    dp.include_router(get_admin_router(config, sessions))
    dp.include_router(get_purchase_router(config, sessions, wizard, screens))
    dp.include_router(get_public_router(config, api, sessions, wizard, screens))
    return dp


async def resolve_bot_token(config: Config, api: BackendClient) -> str:
    """Prefer the token stored in the backend's Telegram auth settings when admin access is configured."""
    if not config.has_admin_credentials:
        return config.bot_token
    try:
        admin_token = await api.login(config.admin_email, config.admin_password)
        token = await api.get_bot_token(admin_token) if admin_token else ""
    except BackendError as exc:
        if not config.bot_token:
            raise RuntimeError(f"could not fetch the bot token from the backend: {exc}") from exc
        logger.warning("bot token bootstrap failed, using TELEGRAM_BOT_TOKEN: %s", exc)
        return config.bot_token
    if not token:
        if not config.bot_token:
            raise RuntimeError("backend has no Telegram bot token configured")
        return config.bot_token
    logger.info("bot token loaded from backend auth settings")
    return token


async def build_session_store(config: Config) -> SessionStore:
    if config.session_store == "memory":
        return MemorySessionStore()
    store = SQLiteSessionStore(config.db_path, TokenCipher(config.encryption_key))
    await store.init()
    removed = await store.purge_expired()
    if removed:
        logger.info("dropped %s expired sessions", removed)
    return store


async def build_wizard_store(config: Config) -> WizardStore:
    if config.wizard_store == "sqlite":
        store = SQLiteWizardStore(config.db_path)
        await store.init()
        return store
    return MemoryWizardStore()


async def setup_bot_ui(bot: Bot, config: Config) -> None:
    try:
        await bot.delete_my_commands()
        if config.webapp_url:
            await bot.set_chat_menu_button(
                menu_button=MenuButtonWebApp(
                    text=config.bot_name("en"),
                    web_app=WebAppInfo(url=config.webapp_url),
                )
            )
    except TelegramAPIError as exc:
        logger.warning("bot UI setup failed: %s", exc)


async def main() -> None:
    config = load_config()
    setup_logging(config.log_level, config.debug)

    api = BackendClient(config.api_base_url, timeout=config.api_timeout)
    bot_token = await resolve_bot_token(config, api)
    config.bot_token = bot_token

    bot = Bot(token=bot_token, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    session_store = await build_session_store(config)
    wizard_store = await build_wizard_store(config)
    sessions = SessionManager(
        api,
        session_store,
        TelegramAuthClient(api, bot_token),
        default_language=config.default_language,
        photo_lookup=partial(fetch_photo_url, bot),
    )
    try:
        me = await asyncio.wait_for(bot.get_me(), timeout=config.init_timeout)
        logger.info("starting @%s", me.username)
        await setup_bot_ui(bot, config)
        dp = build_dispatcher(config, api, sessions, wizard_store)
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        await session_store.close()
        await api.close()
        await bot.session.close()


if __name__ == "__main__":
    asyncio.run(main())
