from __future__ import annotations

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from archnet_bot.config import Config
from archnet_bot.services.auth import SessionManager, TelegramIdentity
from archnet_bot.texts.catalog import TEXTS


def get_admin_router(config: Config, sessions: SessionManager) -> Router:
    router = Router(name="admin")

    def is_admin(user_id: int) -> bool:
        return user_id in config.admin_ids

    @router.message(Command("start_admin"))
    async def start_admin(message: Message) -> None:
        identity = TelegramIdentity.from_user(message.from_user)
        language = await sessions.resolve_language(identity)
        if not is_admin(identity.id):
            await message.answer(TEXTS.get("access_denied", language))
            return
        await message.answer(
            "\n\n".join(
                [TEXTS.get("admin_welcome", language), TEXTS.get("admin_commands", language)]
            )
        )

    return router
