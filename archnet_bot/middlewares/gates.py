from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from aiogram import BaseMiddleware, Bot, Router
from aiogram.exceptions import TelegramAPIError
from aiogram.types import CallbackQuery, Message, TelegramObject

from archnet_bot.services.auth import AuthError, SessionManager, TelegramIdentity
from archnet_bot.services.logs import for_user
from archnet_bot.services.screens import Screens
from archnet_bot.texts.catalog import TEXTS, TextCatalog

logger = logging.getLogger(__name__)

Handler = Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]]

MEMBER_STATUSES = frozenset({"member", "administrator", "creator"})


class MembershipStatus(Enum):
    ALLOWED = "allowed"
    DENIED = "denied"
    CHECK_FAILED = "check_failed"


async def check_membership(bot: Bot, channel: str, user_id: int) -> MembershipStatus:
    try:
        member = await bot.get_chat_member(chat_id=channel, user_id=user_id)
    except TelegramAPIError as exc:
        for_user(logger, user_id).warning("membership check in %s failed: %s", channel, exc)
        return MembershipStatus.CHECK_FAILED
    status = getattr(member.status, "value", member.status)
    return MembershipStatus.ALLOWED if status in MEMBER_STATUSES else MembershipStatus.DENIED


def _reply_target(event: Union[Message, CallbackQuery]) -> Optional[Message]:
    if isinstance(event, CallbackQuery):
        return event.message
    return event


class AuthGate(BaseMiddleware):
    """Makes sure the sender holds a backend session before the handler runs."""

    def __init__(self, sessions: SessionManager, texts: TextCatalog = TEXTS, default_language: str = "en") -> None:
        self._sessions = sessions
        self._texts = texts
        self._default_language = default_language

    async def __call__(self, handler: Handler, event: TelegramObject, data: Dict[str, Any]) -> Any:
        user = getattr(event, "from_user", None)
        if user is None:
            return await handler(event, data)
        identity = TelegramIdentity.from_user(user)
        try:
            await self._sessions.ensure_authenticated(identity)
        except AuthError as exc:
            for_user(logger, identity.id).error("authentication failed: %s", exc)
            language = await self._sessions.get_cached_language(identity.id)
            text = self._texts.get("auth_error", language or identity.language_code or self._default_language)
            if isinstance(event, CallbackQuery):
                await event.answer(text, show_alert=True)
            else:
                await event.answer(text)
            return None
        return await handler(event, data)


class ChannelGate(BaseMiddleware):
    """Blocks non-members of the required channel. A failed check lets the user through."""

    def __init__(self, channel: str, sessions: SessionManager, screens: Screens) -> None:
        self._channel = channel
        self._sessions = sessions
        self._screens = screens

    @property
    def enabled(self) -> bool:
        return bool(self._channel)

    async def allows(self, bot: Bot, user_id: int) -> bool:
        if not self._channel:
            return True
        status = await check_membership(bot, self._channel, user_id)
        if status is MembershipStatus.CHECK_FAILED:
            for_user(logger, user_id).warning("letting user through without a membership answer")
            return True
        return status is MembershipStatus.ALLOWED

    async def __call__(self, handler: Handler, event: TelegramObject, data: Dict[str, Any]) -> Any:
        user = getattr(event, "from_user", None)
        if user is None or not self._channel:
            return await handler(event, data)
        if await self.allows(data["bot"], user.id):
            return await handler(event, data)
        language = await self._sessions.resolve_language(TelegramIdentity.from_user(user))
        if isinstance(event, CallbackQuery):
            await event.answer()
        target = _reply_target(event)
        if target is not None:
            await self._screens.send_join_prompt(target, language)
        return None


def apply_gates(
    router: Router,
    sessions: SessionManager,
    screens: Screens,
    *,
    channel: str = "",
    default_language: str = "en",
) -> None:
    """Auth first, then channel membership, on both messages and callbacks."""
    auth_gate = AuthGate(sessions, default_language=default_language)
    channel_gate = ChannelGate(channel, sessions, screens)
    for observer in (router.message, router.callback_query):
        observer.middleware(auth_gate)
        observer.middleware(channel_gate)
