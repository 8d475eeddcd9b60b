from __future__ import annotations

import hashlib
import hmac
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError
from aiogram.types import User

from archnet_bot.api.client import ApiError, BackendClient, BackendError
from archnet_bot.models.db import SESSION_TTL_SECONDS, Session, SessionStore
from archnet_bot.services.locks import KeyedLocks
from archnet_bot.services.logs import for_user
from archnet_bot.services.security import mask_token

logger = logging.getLogger(__name__)

T = TypeVar("T")
PhotoLookup = Callable[[int], Awaitable[Optional[str]]]


class AuthError(Exception):
    """The backend refused (or could not be asked) to issue a session token."""


class SessionExpiredError(Exception):
    """Re-authentication after a rejected token did not succeed."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"session expired for user {user_id}")


@dataclass(slots=True)
class TelegramIdentity:
    id: int
    username: str = ""
    first_name: str = ""
    last_name: str = ""
    language_code: str = ""
    photo_url: str = ""

    @classmethod
    def from_user(cls, user: User) -> "TelegramIdentity":
        return cls(
            id=user.id,
            username=user.username or "",
            first_name=user.first_name or "",
            last_name=user.last_name or "",
            language_code=user.language_code or "",
        )


def build_check_string(identity: TelegramIdentity, auth_date: int) -> str:
    fields = {
        "auth_date": str(auth_date),
        "first_name": identity.first_name,
        "id": str(identity.id),
        "last_name": identity.last_name,
        "username": identity.username,
    }
    return "\n".join(f"{key}={value}" for key, value in sorted(fields.items()) if value)


def sign_identity(bot_token: str, identity: TelegramIdentity, auth_date: int) -> str:
    """HMAC-SHA256 of the check string keyed by SHA-256 of the bot token, hex encoded."""
    secret = hashlib.sha256(bot_token.encode("utf-8")).digest()
    check = build_check_string(identity, auth_date)
    return hmac.new(secret, check.encode("utf-8"), hashlib.sha256).hexdigest()


def build_login_payload(
    bot_token: str,
    identity: TelegramIdentity,
    language: str,
    auth_date: Optional[int] = None,
) -> Dict[str, Any]:
    auth_date = int(time.time()) if auth_date is None else auth_date
    payload: Dict[str, Any] = {
        "telegram_id": identity.id,
        "timestamp": auth_date,
        "signature": sign_identity(bot_token, identity, auth_date),
    }
    optional = {
        "username": identity.username,
        "first_name": identity.first_name,
        "last_name": identity.last_name,
        "lang": language,
        "photo_url": identity.photo_url,
    }
    payload.update({key: value for key, value in optional.items() if value})
    return payload


def is_auth_failure(exc: BaseException) -> bool:
    return isinstance(exc, ApiError) and exc.is_auth_error


async def fetch_photo_url(bot: Bot, user_id: int) -> Optional[str]:
    """Best effort lookup of the user's current avatar as a file URL."""
    try:
        photos = await bot.get_user_profile_photos(user_id=user_id, limit=1)
        if not photos.photos or not photos.photos[0]:
            return None
        largest = photos.photos[0][-1]
        file = await bot.get_file(largest.file_id)
    except TelegramAPIError as exc:
        logger.debug("profile photo lookup failed for %s: %s", user_id, exc)
        return None
    if not file.file_path:
        return None
    return f"https://api.telegram.org/file/bot{bot.token}/{file.file_path}"


class TelegramAuthClient:
    """Exchanges a signed Telegram identity for a backend session token."""

    def __init__(self, api: BackendClient, bot_token: str) -> None:
        self._api = api
        self._bot_token = bot_token

    async def login(self, identity: TelegramIdentity, language: str = "") -> str:
        payload = build_login_payload(self._bot_token, identity, language or identity.language_code)
        try:
            token = await self._api.login_telegram(payload)
        except BackendError as exc:
            raise AuthError(f"telegram login failed for {identity.id}: {exc}") from exc
        if not token:
            raise AuthError(f"telegram login for {identity.id} returned no token")
        return token


class SessionManager:
    """Owns the per-user token lifecycle on top of a ``SessionStore``."""

    def __init__(
        self,
        api: BackendClient,
        store: SessionStore,
        auth_client: TelegramAuthClient,
        *,
        default_language: str = "en",
        photo_lookup: Optional[PhotoLookup] = None,
        ttl: int = SESSION_TTL_SECONDS,
    ) -> None:
        self._api = api
        self._store = store
        self._auth = auth_client
        self._default_language = default_language
        self._photo_lookup = photo_lookup
        self._ttl = ttl
        self._locks = KeyedLocks()

    async def get_token(self, user_id: int) -> str:
        return await self._store.get_token(user_id)

    async def get_cached_language(self, user_id: int) -> str:
        return await self._store.get_language(user_id)

    async def set_language(self, user_id: int, language: str) -> None:
        await self._store.set_language(user_id, language)

    async def resolve_language(self, identity: TelegramIdentity) -> str:
        cached = await self._store.get_language(identity.id)
        if cached:
            return cached
        token = await self._store.get_token(identity.id)
        if token:
            try:
                info = await self._api.get_user_info(token)
            except BackendError as exc:
                for_user(logger, identity.id).debug("user info lookup failed: %s", exc)
            else:
                if info.lang:
                    await self._store.set_language(identity.id, info.lang)
                    return info.lang
        return identity.language_code or self._default_language

    async def authenticate(self, identity: TelegramIdentity) -> str:
        log = for_user(logger, identity.id)
        language = await self._store.get_language(identity.id)
        if not identity.photo_url and self._photo_lookup is not None:
            identity.photo_url = await self._photo_lookup(identity.id) or ""
        token = await self._auth.login(identity, language)
        await self._store.set(Session.issue(identity.id, token, language, ttl=self._ttl))
        log.info("authenticated, token=%s", mask_token(token))
        return token

    async def ensure_authenticated(self, identity: TelegramIdentity) -> str:
        token = await self._store.get_token(identity.id)
        if token:
            return token
        async with self._locks.get(identity.id):
            # another update may have logged the user in while we waited
            token = await self._store.get_token(identity.id)
            if token:
                return token
            return await self.authenticate(identity)

    async def execute_with_auth(
        self,
        identity: TelegramIdentity,
        action: Callable[[str], Awaitable[T]],
        *,
        is_retryable: Callable[[BaseException], bool] = is_auth_failure,
    ) -> T:
        """Run ``action(token)``, re-authenticating and retrying once on a rejected token."""
        token = await self.ensure_authenticated(identity)
        try:
            return await action(token)
        except BackendError as exc:
            if not is_retryable(exc):
                raise
            for_user(logger, identity.id).info("token rejected (%s), re-authenticating", exc)

        try:
            token = await self.authenticate(identity)
        except AuthError as exc:
            await self._store.delete(identity.id)
            raise SessionExpiredError(identity.id) from exc

        try:
            return await action(token)
        except BackendError as exc:
            if not is_retryable(exc):
                raise
            await self._store.delete(identity.id)
            raise SessionExpiredError(identity.id) from exc
