import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from archnet_bot.api.client import TransportError
from archnet_bot.models.db import MemorySessionStore, Session
from archnet_bot.models.wizard import MemoryWizardStore
from archnet_bot.routers.admin import get_admin_router
from archnet_bot.routers.public import get_public_router
from archnet_bot.services.screens import Screens
from archnet_bot.services.wizard import PurchaseWizard

from fakes import (
    FakeBackend,
    find_handler,
    last_markup,
    last_text,
    make_callback,
    make_config,
    make_message,
    make_sessions,
    make_user,
)


def make_bot(status="member"):
    bot = MagicMock()
    bot.get_chat_member = AsyncMock(return_value=SimpleNamespace(status=status))
    return bot


class PublicRouterTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.api = FakeBackend()
        self.store = MemorySessionStore()
        self.sessions = make_sessions(self.api, self.store)
        self.config = make_config(required_channel="@archnet")
        screens = Screens(self.config)
        wizard = PurchaseWizard(self.api, self.sessions, MemoryWizardStore(), screens)
        self.router = get_public_router(self.config, self.api, self.sessions, wizard, screens)

    def handler(self, observer, name):
        return find_handler(self.router, observer, name)

    async def test_first_start_asks_for_language(self):
        message = make_message(make_user(language_code="ru"), "/start")
        await self.handler("message", "start")(message, make_bot())

        self.assertEqual(len(self.api.login_calls), 1)
        self.assertEqual(last_text(message.answer), "🌐 Пожалуйста, выберите язык:")
        buttons = [button.callback_data for row in last_markup(message.answer).inline_keyboard for button in row]
        self.assertEqual(buttons, ["lang:fa", "lang:en", "lang:ru", "lang:zh"])

    async def test_start_for_non_member_shows_join_prompt_only(self):
        await self.store.set(Session.issue(42, "tok", "en"))
        message = make_message(text="/start")
        await self.handler("message", "start")(message, make_bot("left"))

        message.answer.assert_awaited_once()
        self.assertIn("join our channel", last_text(message.answer))
        self.assertEqual(self.api.login_calls, [])

    async def test_start_for_member_shows_welcome(self):
        await self.store.set(Session.issue(42, "tok", "en"))
        message = make_message(text="/start")
        await self.handler("message", "start")(message, make_bot("member"))
        self.assertIn("Welcome to <b>ArchNet</b>", last_text(message.answer))

    async def test_start_reports_login_failure(self):
        self.api.login_error = TransportError("down")
        message = make_message(text="/start")
        await self.handler("message", "start")(message, make_bot())
        self.assertIn("could not sign you in", last_text(message.answer))

    async def test_language_choice_is_saved_and_welcomes(self):
        await self.store.set(Session.issue(42, "tok"))
        callback = make_callback("lang:fa")
        await self.handler("callback_query", "language_chosen")(callback)

        self.assertEqual(self.api.language_updates, [("tok", "fa")])
        self.assertEqual(await self.store.get_language(42), "fa")
        callback.message.delete.assert_awaited_once()
        self.assertIn("آرچ‌نت", last_text(callback.message.answer))

    async def test_unsupported_language_is_ignored(self):
        callback = make_callback("lang:de")
        await self.handler("callback_query", "language_chosen")(callback)
        callback.answer.assert_awaited_once_with()
        self.assertEqual(self.api.language_updates, [])

    async def test_unknown_menu_buttons_are_acknowledged(self):
        for data in ("menu:refresh", "settings:theme"):
            with self.subTest(data=data):
                callback = make_callback(data)
                await self.handler("callback_query", "stale_menu_button")(callback)
                callback.answer.assert_awaited_once_with()
                callback.message.answer.assert_not_awaited()

    async def test_menu_label_runs_its_action(self):
        await self.store.set(Session.issue(42, "tok", "en"))
        message = make_message(text="💰 Balance")
        await self.handler("message", "fallback")(message)
        self.assertEqual(last_text(message.answer), "💰 Your balance: <b>1500</b>")

    async def test_invitation_shows_referral_stats(self):
        await self.store.set(Session.issue(42, "tok", "en"))
        message = make_message(text="🎁 Invite friends")
        await self.handler("message", "fallback")(message)
        text = last_text(message.answer)
        self.assertIn("<code>REF42</code>", text)
        self.assertIn("Registered friends: 3", text)

    async def test_unknown_text(self):
        await self.store.set(Session.issue(42, "tok", "en"))
        message = make_message(text="hello")
        await self.handler("message", "fallback")(message)
        self.assertEqual(last_text(message.answer), "🤔 Unknown command. Use the menu buttons below.")

    async def test_status_without_services(self):
        await self.store.set(Session.issue(42, "tok", "en"))
        message = make_message(text="/status")
        await self.handler("message", "status")(message)
        self.assertIn("no active services", last_text(message.answer))


class AdminRouterTests(unittest.IsolatedAsyncioTestCase):
    async def test_admin_access(self):
        sessions = make_sessions(FakeBackend())
        router = get_admin_router(make_config(admin_ids={42}), sessions)
        start_admin = find_handler(router, "message", "start_admin")

        admin = make_message(make_user(42), "/start_admin")
        await start_admin(admin)
        self.assertTrue(last_text(admin.answer).startswith("👑 Welcome, administrator."))

        stranger = make_message(make_user(7), "/start_admin")
        await start_admin(stranger)
        self.assertEqual(last_text(stranger.answer), "⛔ Access denied.")


if __name__ == "__main__":
    unittest.main()
