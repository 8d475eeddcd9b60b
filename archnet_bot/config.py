from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Set

SUPPORTED_LANGUAGES = ("fa", "en", "ru", "zh")


def _parse_admin_ids(raw: str) -> Set[int]:
    result: Set[int] = set()
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        if chunk.lstrip("+-").isdigit():
            result.add(int(chunk))
    return result


def _parse_bool(raw: Optional[str]) -> bool:
    return (raw or "").strip().lower() in {"1", "true", "yes", "on"}


def _parse_float(raw: Optional[str], default: float) -> float:
    try:
        value = float(raw) if raw else default
    except ValueError:
        return default
    return value if value > 0 else default


def _parse_bot_names() -> Dict[str, str]:
    names: Dict[str, str] = {}
    fallback = os.getenv("BOT_NAME", "ArchNet")
    for language in SUPPORTED_LANGUAGES:
        names[language] = os.getenv(f"BOT_NAME_{language.upper()}", fallback)
    return names


@dataclass(slots=True)
class Config:
    bot_token: str
    api_base_url: str
    admin_email: str = ""
    admin_password: str = ""
    admin_ids: Set[int] = field(default_factory=set)
    bot_names: Dict[str, str] = field(default_factory=dict)
    required_channel: str = ""
    db_path: str = "data/bot.db"
    session_store: str = "sqlite"
    wizard_store: str = "memory"
    encryption_key: Optional[bytes] = None
    default_language: str = "en"
    webapp_url: str = ""
    welcome_image: str = "assets/welcome.jpg"
    debug: bool = False
    log_level: str = "INFO"
    init_timeout: float = 5.0
    api_timeout: float = 10.0

    @property
    def has_admin_credentials(self) -> bool:
        return bool(self.admin_email and self.admin_password)

    def bot_name(self, language: str) -> str:
        return self.bot_names.get(language) or self.bot_names.get("en") or "ArchNet"


def load_config() -> Config:
    api_base_url = os.getenv("API_BASE_URL", "").strip()
    if not api_base_url:
        raise RuntimeError("API_BASE_URL environment variable is not set")

    token = os.getenv("TELEGRAM_BOT_TOKEN", "").strip()
    admin_email = os.getenv("ADMIN_EMAIL", "").strip()
    admin_password = os.getenv("ADMIN_PASSWORD", "")
    if not token and not (admin_email and admin_password):
        raise RuntimeError(
            "TELEGRAM_BOT_TOKEN is not set and ADMIN_EMAIL/ADMIN_PASSWORD are missing"
        )

    encryption = os.getenv("SESSION_ENCRYPTION_KEY")
    encryption_key = encryption.encode("utf-8") if encryption else None

    default_lang = os.getenv("DEFAULT_LANGUAGE", "en").lower()
    if default_lang not in SUPPORTED_LANGUAGES:
        default_lang = "en"

    session_store = os.getenv("SESSION_STORE", "sqlite").lower()
    if session_store not in {"sqlite", "memory"}:
        session_store = "sqlite"
    wizard_store = os.getenv("WIZARD_STORE", "memory").lower()
    if wizard_store not in {"sqlite", "memory"}:
        wizard_store = "memory"

    debug = _parse_bool(os.getenv("BOT_DEBUG"))
    log_level = os.getenv("LOG_LEVEL", "DEBUG" if debug else "INFO").upper()

    return Config(
        bot_token=token,
        api_base_url=api_base_url.rstrip("/"),
        admin_email=admin_email,
        admin_password=admin_password,
        admin_ids=_parse_admin_ids(os.getenv("ADMIN_IDS", "")),
        bot_names=_parse_bot_names(),
        required_channel=os.getenv("REQUIRED_CHANNEL", "").strip(),
        db_path=os.getenv("DB_PATH", "data/bot.db"),
        session_store=session_store,
        wizard_store=wizard_store,
        encryption_key=encryption_key,
        default_language=default_lang,
        webapp_url=os.getenv("WEBAPP_URL", "").strip(),
        welcome_image=os.getenv("WELCOME_IMAGE", "assets/welcome.jpg"),
        debug=debug,
        log_level=log_level,
        init_timeout=_parse_float(os.getenv("BOT_TIMEOUT_S"), 5.0),
        api_timeout=_parse_float(os.getenv("API_TIMEOUT_S"), 10.0),
    )
