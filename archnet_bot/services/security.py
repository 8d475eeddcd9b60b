from __future__ import annotations

import base64
import binascii
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken


def _load_fernet(key: bytes) -> Fernet:
    # accept a Fernet key as-is or any urlsafe-base64 encoding of 32 raw bytes
    try:
        raw = base64.urlsafe_b64decode(key)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("SESSION_ENCRYPTION_KEY is not valid base64") from exc
    if len(raw) != 32:
        raise ValueError("SESSION_ENCRYPTION_KEY must decode to 32 bytes")
    return Fernet(base64.urlsafe_b64encode(raw))


class TokenCipher:
    """Seals backend session tokens before they are written to disk.

    Without a key the cipher is a pass-through, so a plain SQLite file keeps
    working for local development.
    """

    def __init__(self, key: Optional[bytes] = None) -> None:
        self._fernet: Optional[Fernet] = _load_fernet(key) if key else None

    @property
    def enabled(self) -> bool:
        return self._fernet is not None

    def seal(self, token: str) -> str:
        if not token or self._fernet is None:
            return token
        return self._fernet.encrypt(token.encode("utf-8")).decode("ascii")

    def unseal(self, stored: str) -> Optional[str]:
        """Return the plain token, or ``None`` when it was sealed with another key."""
        if not stored or self._fernet is None:
            return stored
        try:
            return self._fernet.decrypt(stored.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError):
            return None


def mask_token(value: Optional[str]) -> str:
    if not value:
        return "-"
    if len(value) <= 8:
        return "***"
    return f"{value[:4]}***{value[-4:]}"
