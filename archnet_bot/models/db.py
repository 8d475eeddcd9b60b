from __future__ import annotations

import os
import time
from dataclasses import dataclass, replace
from typing import Dict, Optional, Protocol

import aiosqlite

from archnet_bot.services.security import TokenCipher

SESSION_TTL_SECONDS = 7 * 24 * 60 * 60


@dataclass(slots=True)
class Session:
    user_id: int
    token: str
    language: str
    expires_at: float

    def is_valid(self, now: Optional[float] = None) -> bool:
        return bool(self.token) and (time.time() if now is None else now) < self.expires_at

    @classmethod
    def issue(cls, user_id: int, token: str, language: str = "", ttl: int = SESSION_TTL_SECONDS) -> "Session":
        return cls(user_id=user_id, token=token, language=language, expires_at=time.time() + ttl)


class SessionStore(Protocol):
    async def init(self) -> None: ...

    async def get(self, user_id: int) -> Optional[Session]: ...

    async def get_token(self, user_id: int) -> str: ...

    async def get_language(self, user_id: int) -> str: ...

    async def set(self, session: Session) -> None: ...

    async def set_language(self, user_id: int, language: str) -> None: ...

    async def delete(self, user_id: int) -> None: ...

    async def close(self) -> None: ...


class MemorySessionStore:
    """Process-local sessions; lost on restart."""

    def __init__(self) -> None:
        self._sessions: Dict[int, Session] = {}

    async def init(self) -> None:
        return None

    async def get(self, user_id: int) -> Optional[Session]:
        session = self._sessions.get(user_id)
        if session is None or not session.is_valid():
            return None
        return replace(session)

    async def get_token(self, user_id: int) -> str:
        session = await self.get(user_id)
        return session.token if session else ""

    async def get_language(self, user_id: int) -> str:
        # the language outlives the token
        session = self._sessions.get(user_id)
        return session.language if session else ""

    async def set(self, session: Session) -> None:
        self._sessions[session.user_id] = replace(session)

    async def set_language(self, user_id: int, language: str) -> None:
        session = self._sessions.get(user_id)
        if session is not None:
            session.language = language

    async def delete(self, user_id: int) -> None:
        self._sessions.pop(user_id, None)

    async def close(self) -> None:
        self._sessions.clear()


class SQLiteSessionStore:
    def __init__(self, db_path: str, cipher: Optional[TokenCipher] = None) -> None:
        self._db_path = db_path
        self._cipher = cipher or TokenCipher()
        directory = os.path.dirname(os.path.abspath(db_path))
        if directory and not os.path.exists(directory):
            os.makedirs(directory, exist_ok=True)

    async def init(self) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS sessions (
                    telegram_id INTEGER PRIMARY KEY,
                    token TEXT NOT NULL,
                    lang TEXT NOT NULL DEFAULT '',
                    expires_at REAL NOT NULL
                )
                """
            )
            await db.commit()

    async def _fetch(self, user_id: int) -> Optional[aiosqlite.Row]:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT telegram_id, token, lang, expires_at FROM sessions WHERE telegram_id = ?",
                (user_id,),
            ) as cursor:
                return await cursor.fetchone()

    async def get(self, user_id: int) -> Optional[Session]:
        row = await self._fetch(user_id)
        if row is None:
            return None
        token = self._cipher.unseal(row["token"])
        if not token:
            return None
        session = Session(
            user_id=row["telegram_id"],
            token=token,
            language=row["lang"] or "",
            expires_at=float(row["expires_at"]),
        )
        return session if session.is_valid() else None

    async def get_token(self, user_id: int) -> str:
        session = await self.get(user_id)
        return session.token if session else ""

    async def get_language(self, user_id: int) -> str:
        row = await self._fetch(user_id)
        return (row["lang"] or "") if row is not None else ""

    async def set(self, session: Session) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                """
                INSERT OR REPLACE INTO sessions (telegram_id, token, lang, expires_at)
                VALUES (?, ?, ?, ?)
                """,
                (session.user_id, self._cipher.seal(session.token), session.language, session.expires_at),
            )
            await db.commit()

    async def set_language(self, user_id: int, language: str) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                "UPDATE sessions SET lang = ? WHERE telegram_id = ?",
                (language, user_id),
            )
            await db.commit()

    async def delete(self, user_id: int) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute("DELETE FROM sessions WHERE telegram_id = ?", (user_id,))
            await db.commit()

    async def purge_expired(self, now: Optional[float] = None) -> int:
        """Drop rows whose token expired and that carry no language preference."""
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute(
                "DELETE FROM sessions WHERE expires_at <= ? AND lang = ''",
                (time.time() if now is None else now,),
            )
            await db.commit()
            return cursor.rowcount

    async def close(self) -> None:
        return None
