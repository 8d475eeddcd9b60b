import os
import tempfile
import time
import unittest

import aiosqlite
from cryptography.fernet import Fernet

from archnet_bot.models.db import MemorySessionStore, Session, SQLiteSessionStore
from archnet_bot.models.wizard import SQLiteWizardStore, WizardState
from archnet_bot.services.security import TokenCipher

from fakes import BASIC_PLAN


class MemorySessionStoreTests(unittest.IsolatedAsyncioTestCase):
    async def test_valid_session_returns_token(self):
        store = MemorySessionStore()
        await store.set(Session.issue(1, "tok", "en"))
        self.assertEqual(await store.get_token(1), "tok")

    async def test_expired_session_has_no_token_but_keeps_language(self):
        store = MemorySessionStore()
        await store.set(Session(user_id=1, token="tok", language="fa", expires_at=time.time() - 1))
        self.assertEqual(await store.get_token(1), "")
        self.assertIsNone(await store.get(1))
        self.assertEqual(await store.get_language(1), "fa")

    async def test_set_language_only_touches_existing_sessions(self):
        store = MemorySessionStore()
        await store.set_language(5, "ru")
        self.assertEqual(await store.get_language(5), "")

        await store.set(Session.issue(5, "tok"))
        await store.set_language(5, "ru")
        self.assertEqual(await store.get_language(5), "ru")

    async def test_delete(self):
        store = MemorySessionStore()
        await store.set(Session.issue(1, "tok"))
        await store.delete(1)
        self.assertEqual(await store.get_token(1), "")


class SQLiteSessionStoreTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self._tmp.name, "nested", "bot.db")

    async def asyncTearDown(self):
        self._tmp.cleanup()

    async def test_sessions_survive_a_new_store_instance(self):
        store = SQLiteSessionStore(self.path)
        await store.init()
        await store.set(Session.issue(7, "tok-7", "zh"))

        reopened = SQLiteSessionStore(self.path)
        await reopened.init()
        session = await reopened.get(7)
        self.assertEqual(session.token, "tok-7")
        self.assertEqual(session.language, "zh")

    async def test_replacing_a_session_keeps_one_row(self):
        store = SQLiteSessionStore(self.path)
        await store.init()
        await store.set(Session.issue(7, "old", "en"))
        await store.set(Session.issue(7, "new", "en"))
        async with aiosqlite.connect(self.path) as db:
            async with db.execute("SELECT COUNT(*) FROM sessions") as cursor:
                (count,) = await cursor.fetchone()
        self.assertEqual(count, 1)
        self.assertEqual(await store.get_token(7), "new")

    async def test_expired_rows_keep_language_until_purged(self):
        store = SQLiteSessionStore(self.path)
        await store.init()
        past = time.time() - 10
        await store.set(Session(user_id=1, token="a", language="fa", expires_at=past))
        await store.set(Session(user_id=2, token="b", language="", expires_at=past))

        self.assertEqual(await store.get_token(1), "")
        self.assertEqual(await store.get_language(1), "fa")
        self.assertEqual(await store.purge_expired(), 1)
        self.assertEqual(await store.get_language(1), "fa")

    async def test_tokens_are_encrypted_at_rest(self):
        key = Fernet.generate_key()
        store = SQLiteSessionStore(self.path, TokenCipher(key))
        await store.init()
        await store.set(Session.issue(3, "secret-token", "en"))

        async with aiosqlite.connect(self.path) as db:
            async with db.execute("SELECT token FROM sessions WHERE telegram_id = 3") as cursor:
                (stored,) = await cursor.fetchone()
        self.assertNotIn("secret-token", stored)
        self.assertEqual(await store.get_token(3), "secret-token")

        other = SQLiteSessionStore(self.path, TokenCipher(Fernet.generate_key()))
        self.assertEqual(await other.get_token(3), "")

    async def test_wizard_state_persists(self):
        store = SQLiteWizardStore(self.path)
        await store.init()
        await store.save(42, WizardState.from_plan(BASIC_PLAN))

        restored = await SQLiteWizardStore(self.path).get(42)
        self.assertEqual(restored, WizardState.from_plan(BASIC_PLAN))
        await store.delete(42)
        self.assertIsNone(await store.get(42))


class TokenCipherTests(unittest.TestCase):
    def test_invalid_key_is_rejected(self):
        with self.assertRaises(ValueError):
            TokenCipher(b"not-a-key")

    def test_without_key_tokens_pass_through(self):
        cipher = TokenCipher()
        self.assertFalse(cipher.enabled)
        self.assertEqual(cipher.seal("abc"), "abc")


if __name__ == "__main__":
    unittest.main()
