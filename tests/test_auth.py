import hashlib
import hmac
import time
import unittest

from archnet_bot.api.client import ApiError, TransportError
from archnet_bot.models.db import MemorySessionStore, Session
from archnet_bot.services.auth import (
    AuthError,
    SessionExpiredError,
    SessionManager,
    TelegramAuthClient,
    TelegramIdentity,
    build_check_string,
    build_login_payload,
    sign_identity,
)

from fakes import BOT_TOKEN, FakeBackend, make_sessions


IDENTITY = TelegramIdentity(id=42, username="ann", first_name="Ann", language_code="en")


class SignatureTests(unittest.TestCase):
    def test_check_string_is_sorted_and_skips_empty_fields(self):
        self.assertEqual(
            build_check_string(IDENTITY, 1700000000),
            "auth_date=1700000000\nfirst_name=Ann\nid=42\nusername=ann",
        )

    def test_signature_is_hmac_keyed_by_token_hash(self):
        secret = hashlib.sha256(BOT_TOKEN.encode()).digest()
        expected = hmac.new(
            secret,
            b"auth_date=1700000000\nfirst_name=Ann\nid=42\nusername=ann",
            hashlib.sha256,
        ).hexdigest()
        self.assertEqual(sign_identity(BOT_TOKEN, IDENTITY, 1700000000), expected)
        self.assertEqual(sign_identity(BOT_TOKEN, IDENTITY, 1700000000), expected)

    def test_login_payload_omits_empty_fields(self):
        payload = build_login_payload(BOT_TOKEN, IDENTITY, "fa", auth_date=1700000000)
        self.assertEqual(payload["telegram_id"], 42)
        self.assertEqual(payload["timestamp"], 1700000000)
        self.assertEqual(payload["lang"], "fa")
        self.assertNotIn("last_name", payload)
        self.assertNotIn("photo_url", payload)
        self.assertEqual(len(payload["signature"]), 64)


class AuthenticateTests(unittest.IsolatedAsyncioTestCase):
    async def test_authenticate_stores_token_for_seven_days(self):
        api = FakeBackend()
        store = MemorySessionStore()
        sessions = make_sessions(api, store)

        token = await sessions.authenticate(TelegramIdentity(id=42, first_name="Ann"))

        session = await store.get(42)
        self.assertEqual(token, "token-1")
        self.assertEqual(session.token, "token-1")
        self.assertAlmostEqual(session.expires_at - time.time(), 7 * 24 * 3600, delta=60)

    async def test_transport_failure_becomes_auth_error(self):
        api = FakeBackend()
        api.login_error = TransportError("down")
        sessions = make_sessions(api)
        with self.assertRaises(AuthError):
            await sessions.authenticate(TelegramIdentity(id=42))

    async def test_ensure_authenticated_reuses_cached_token(self):
        api = FakeBackend()
        sessions = make_sessions(api)
        identity = TelegramIdentity(id=42)
        self.assertEqual(await sessions.get_token(42), "")
        self.assertEqual(await sessions.ensure_authenticated(identity), "token-1")
        self.assertEqual(await sessions.get_token(42), "token-1")
        self.assertEqual(await sessions.ensure_authenticated(identity), "token-1")
        self.assertEqual(len(api.login_calls), 1)

    async def test_photo_lookup_feeds_login_payload(self):
        api = FakeBackend()

        async def lookup(user_id):
            return f"https://cdn.example/{user_id}.jpg"

        sessions = SessionManager(
            api, MemorySessionStore(), TelegramAuthClient(api, BOT_TOKEN), photo_lookup=lookup
        )
        await sessions.authenticate(TelegramIdentity(id=42))
        self.assertEqual(api.login_calls[0]["photo_url"], "https://cdn.example/42.jpg")


class ExecuteWithAuthTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.api = FakeBackend()
        self.store = MemorySessionStore()
        self.sessions = make_sessions(self.api, self.store)
        self.identity = TelegramIdentity(id=42, first_name="Ann")

    async def test_auth_error_triggers_one_reauth_and_one_retry(self):
        await self.store.set(Session.issue(42, "stale", "fa"))
        self.api.rejected_tokens.add("stale")

        info = await self.sessions.execute_with_auth(self.identity, self.api.get_user_info)

        self.assertEqual(info.refer_code, "REF42")
        self.assertEqual(self.api.tokens_seen, ["stale", "token-1"])
        self.assertEqual(len(self.api.login_calls), 1)
        self.assertEqual(await self.store.get_token(42), "token-1")
        self.assertEqual(await self.store.get_language(42), "fa")

    async def test_failed_reauth_deletes_session(self):
        await self.store.set(Session.issue(42, "stale", "fa"))
        self.api.rejected_tokens.add("stale")
        self.api.login_error = ApiError(20002)

        with self.assertRaises(SessionExpiredError):
            await self.sessions.execute_with_auth(self.identity, self.api.get_user_info)
        self.assertEqual(await self.store.get_token(42), "")
        self.assertEqual(await self.store.get_language(42), "")

    async def test_second_rejection_is_not_retried_again(self):
        await self.store.set(Session.issue(42, "stale"))
        self.api.rejected_tokens.update({"stale", "token-1"})

        with self.assertRaises(SessionExpiredError):
            await self.sessions.execute_with_auth(self.identity, self.api.get_user_info)
        self.assertEqual(self.api.tokens_seen, ["stale", "token-1"])

    async def test_other_backend_errors_propagate_without_retry(self):
        await self.store.set(Session.issue(42, "good"))
        calls = []

        async def action(token):
            calls.append(token)
            raise ApiError(61001)

        with self.assertRaises(ApiError) as ctx:
            await self.sessions.execute_with_auth(self.identity, action)
        self.assertEqual(ctx.exception.code, 61001)
        self.assertEqual(calls, ["good"])
        self.assertEqual(self.api.login_calls, [])

    async def test_custom_retry_predicate(self):
        await self.store.set(Session.issue(42, "good"))
        attempts = []

        async def flaky(token):
            attempts.append(token)
            if len(attempts) == 1:
                raise TransportError("reset")
            return "ok"

        result = await self.sessions.execute_with_auth(
            self.identity, flaky, is_retryable=lambda exc: isinstance(exc, TransportError)
        )
        self.assertEqual(result, "ok")
        self.assertEqual(attempts, ["good", "token-1"])

    async def test_language_resolution_order(self):
        identity = TelegramIdentity(id=42, language_code="ru")
        self.assertEqual(await self.sessions.resolve_language(identity), "ru")

        await self.store.set(Session.issue(42, "good"))
        self.api.user_info.lang = "zh"
        self.assertEqual(await self.sessions.resolve_language(identity), "zh")
        self.assertEqual(await self.store.get_language(42), "zh")


if __name__ == "__main__":
    unittest.main()
